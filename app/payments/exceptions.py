"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError - Mirror row lookup failures
    ├── PaymentValidationError - Bad input (amount, method), no remote call made
    ├── PaymentPreconditionError - Business rule failures surfaced verbatim
    │   ├── ListingUnavailableError - Listing inactive or not approved
    │   ├── ProviderPaymentNotReadyError - Provider cannot accept charges yet
    │   ├── PayoutsNotEnabledError - Provider cannot receive payouts yet
    │   ├── InsufficientBalanceError - Payout larger than available balance
    │   └── BookingAlreadyConfirmedError - Checkout on an approved booking
    ├── InvalidSignatureError - Webhook signature verification failed
    └── ProcessorError - Any failure reported by the payment processor
        └── StripeError - Base for all Stripe errors
            ├── StripeCardDeclinedError - Card declined (permanent)
            ├── StripeInvalidAccountError - Invalid Stripe account (permanent)
            ├── StripeInvalidRequestError - Invalid request params (permanent)
            ├── StripeRateLimitError - Rate limited (transient)
            ├── StripeAPIUnavailableError - API unavailable (transient)
            └── StripeTimeoutError - Request timeout (transient)

Usage:
    from payments.exceptions import InsufficientBalanceError

    raise InsufficientBalanceError(
        f"Insufficient balance. Available: {available}",
        details={"available": str(available), "requested": str(amount)},
    )

Note:
    Precondition errors never reach ERROR level logging; they are expected
    outcomes returned to the caller. ProcessorError is logged with
    correlation ids by the adapter and the calling service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """Base exception for all payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError):
    """
    Raised when a payment entity cannot be found.

    Example:
        intent = PaymentIntent.objects.filter(
            stripe_payment_intent_id=intent_id, seeker=seeker
        ).first()
        if not intent:
            raise PaymentNotFoundError(
                "Payment intent not found",
                details={"payment_intent_id": intent_id},
            )
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"
    http_status: int = 404


class PaymentValidationError(PaymentError):
    """
    Raised when payment input validation fails.

    Use for:
    - Non-positive payout amount
    - Unknown payout method
    - Booking duration below one month
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"


# =============================================================================
# Precondition Exceptions
# =============================================================================


class PaymentPreconditionError(PaymentError):
    """Base for business-rule failures that are surfaced to the user as-is."""

    default_error_code: str = "PAYMENT_PRECONDITION_FAILED"


class ListingUnavailableError(PaymentPreconditionError):
    """Raised when a listing is not active or not approved for booking."""

    default_error_code: str = "LISTING_UNAVAILABLE"


class ProviderPaymentNotReadyError(PaymentPreconditionError):
    """
    Raised when the listing's provider cannot accept charges.

    The provider either has no ConnectedAccount or the processor has not
    enabled charges on it yet.
    """

    default_error_code: str = "PROVIDER_PAYMENT_NOT_READY"


class PayoutsNotEnabledError(PaymentPreconditionError):
    """Raised when a provider has no account or payouts are disabled on it."""

    default_error_code: str = "PAYOUTS_NOT_ENABLED"


class InsufficientBalanceError(PaymentPreconditionError):
    """
    Raised when a payout request exceeds the live available balance.

    The message always includes the available amount so the UI can show it.
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"


class BookingAlreadyConfirmedError(PaymentPreconditionError):
    """Raised when checkout is resumed on a booking that is already approved."""

    default_error_code: str = "BOOKING_ALREADY_CONFIRMED"
    http_status: int = 409


# =============================================================================
# Webhook Exceptions
# =============================================================================


class InvalidSignatureError(PaymentError):
    """
    Raised when a webhook payload fails signature verification.

    Never retried by us and never processed; possible tampering.
    """

    default_error_code: str = "INVALID_SIGNATURE"


# =============================================================================
# Processor Exceptions
# =============================================================================


class ProcessorError(PaymentError):
    """
    Wraps any failure reported by the payment processor.

    Safe to retry from the caller: no local mirror row is written on the
    paths that raise it.
    """

    default_error_code: str = "PROCESSOR_ERROR"
    http_status: int = 502
    is_retryable: bool = False


class StripeError(ProcessorError):
    """
    Base exception for all Stripe-related errors.

    Attributes:
        stripe_code: Stripe's internal error code
        decline_code: Card decline code (if applicable)
        is_retryable: Whether the operation can be retried
    """

    default_error_code: str = "STRIPE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class StripeCardDeclinedError(StripeError):
    """Card was declined by the issuing bank (permanent)."""

    default_error_code: str = "CARD_DECLINED"


class StripeInvalidAccountError(StripeError):
    """
    Invalid Stripe Connect account.

    Raised when the connected account is missing, disabled or not able to
    receive payouts. Requires manual intervention.
    """

    default_error_code: str = "INVALID_STRIPE_ACCOUNT"


class StripeInvalidRequestError(StripeError):
    """
    Invalid request parameters sent to Stripe.

    This usually indicates a bug in our code, not a user error.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    """Rate limited by Stripe API."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """Stripe API is temporarily unavailable (network, 5xx)."""

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


class StripeTimeoutError(StripeError):
    """
    Stripe API call timed out.

    The operation may have succeeded on Stripe's side. No local row is
    written; the processor's notification event will self-heal the mirror.
    """

    default_error_code: str = "STRIPE_TIMEOUT"
    is_retryable: bool = True


__all__ = [
    "PaymentError",
    "PaymentNotFoundError",
    "PaymentValidationError",
    "PaymentPreconditionError",
    "ListingUnavailableError",
    "ProviderPaymentNotReadyError",
    "PayoutsNotEnabledError",
    "InsufficientBalanceError",
    "BookingAlreadyConfirmedError",
    "InvalidSignatureError",
    "ProcessorError",
    "StripeError",
    "StripeCardDeclinedError",
    "StripeInvalidAccountError",
    "StripeInvalidRequestError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    "StripeTimeoutError",
]
