"""
Payment orchestrator: turns a booking checkout into a priced PaymentIntent.

The orchestrator:
- Checks the listing and the provider's connected account
- Moves the seeker's booking to pending_payment (resume checkout)
- Prices the booking and snapshots the commission
- Creates a destination-charge PaymentIntent at Stripe
- Persists the local PaymentIntent mirror

It also owns the one place where a processor-reported intent state is
written to the mirror and turned into a booking transition, shared by the
webhook handlers, the manual refresh and the reconciliation task.

Usage:
    from payments.services import PaymentOrchestrator

    result = PaymentOrchestrator.create_booking_payment(
        seeker=request.user,
        listing=listing,
        check_in_date=date(2026, 1, 1),
        duration_months=3,
    )

    if result.success:
        client_secret = result.data.client_secret
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings

from bookings.exceptions import BookingStateError
from bookings.services import BookingService
from core.exceptions import BaseApplicationError
from core.services import BaseService, ServiceResult
from payments.adapters import (
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    StripeAdapter,
)
from payments.commission import BookingCharge, CommissionConfig
from payments.exceptions import (
    BookingAlreadyConfirmedError,
    ListingUnavailableError,
    PaymentNotFoundError,
    PaymentValidationError,
    ProcessorError,
    ProviderPaymentNotReadyError,
)
from payments.models import ConnectedAccount, PaymentIntent, Transfer
from payments.state_machines import PaymentIntentStatus, PaymentPurpose

if TYPE_CHECKING:
    from datetime import date

    from authentication.models import User
    from bookings.models import BookingRequest
    from listings.models import Listing


PROVIDER_NOT_READY_MESSAGE = (
    "Provider payment setup is not complete. Please contact the provider."
)


@dataclass
class BookingPayment:
    """
    Outcome of a successful checkout.

    Attributes:
        payment_intent: Local PaymentIntent mirror row
        booking: Booking now in pending_payment
        charge: Amounts the intent was created with
        client_secret: Token the frontend confirms the payment with
    """

    payment_intent: PaymentIntent
    booking: BookingRequest
    charge: BookingCharge
    client_secret: str


def payment_outcome_for_status(status: str) -> bool | None:
    """
    Booking outcome implied by a bare intent status.

    succeeded -> True, canceled -> False, anything else is still in flight.
    """
    if status == PaymentIntentStatus.SUCCEEDED:
        return True
    if status == PaymentIntentStatus.CANCELED:
        return False
    return None


class PaymentOrchestrator(BaseService):
    """
    Entry point for booking payments.

    All methods are class methods - no instance state is maintained.
    No lock is held across the Stripe call; repeating a checkout is safe
    because the booking transition is idempotent and the Stripe call uses
    an idempotency key derived from the booking and the priced amounts.
    """

    @classmethod
    def create_booking_payment(
        cls,
        seeker: User,
        listing: Listing,
        check_in_date: date,
        duration_months: int,
        message: str = "",
    ) -> ServiceResult[BookingPayment]:
        """
        Create a payment intent for a seeker's booking of a listing.

        Args:
            seeker: Paying user
            listing: Listing being booked
            check_in_date: Requested check-in date
            duration_months: Stay length in months (>= 1)
            message: Optional note for the provider

        Returns:
            ServiceResult containing BookingPayment on success. Failures carry
            LISTING_UNAVAILABLE, PROVIDER_PAYMENT_NOT_READY,
            BOOKING_ALREADY_CONFIRMED or a processor error code.
        """
        logger = cls.get_logger()
        log_context = {
            "seeker_id": seeker.pk,
            "listing_id": str(listing.id),
            "duration_months": duration_months,
        }

        try:
            account = cls._check_preconditions(seeker, listing, duration_months)
            booking = cls._start_checkout(seeker, listing, check_in_date, duration_months, message)
        except BaseApplicationError as exc:
            logger.info(
                "Booking payment refused",
                extra={**log_context, "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)

        log_context["booking_id"] = str(booking.id)
        charge = BookingCharge.price(listing, duration_months, CommissionConfig.current())

        params = CreatePaymentIntentParams(
            amount=charge.amount,
            currency=settings.PAYMENT_CURRENCY,
            destination_account_id=account.stripe_account_id,
            application_fee_amount=charge.application_fee,
            idempotency_key=IdempotencyKeyGenerator.generate(
                "booking_payment",
                booking.id,
                attempt=f"{charge.duration_months}:{charge.amount}:{charge.application_fee}",
            ),
            metadata=cls._intent_metadata(booking, charge),
        )

        try:
            result = StripeAdapter.create_payment_intent(params, trace_id=str(booking.id))
        except ProcessorError as exc:
            logger.error(
                "Stripe rejected booking payment",
                extra={**log_context, "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)

        # A repeated checkout with identical amounts gets the same intent back
        payment_intent, created = PaymentIntent.objects.update_or_create(
            stripe_payment_intent_id=result.id,
            defaults={
                "booking": booking,
                "seeker": seeker,
                "provider": listing.provider,
                "listing": listing,
                "amount": charge.amount,
                "currency": settings.PAYMENT_CURRENCY,
                "status": result.status,
                "purpose": PaymentPurpose.BOOKING_FEE,
                "commission_percentage": charge.commission_percentage,
                "application_fee_amount": charge.application_fee,
                "transfer_destination": account.stripe_account_id,
                "transfer_amount": charge.transfer_amount,
                "metadata": params.metadata,
                "client_secret": result.client_secret or "",
            },
        )

        logger.info(
            "Booking payment created",
            extra={
                **log_context,
                "payment_intent_id": result.id,
                "amount": charge.amount,
                "application_fee": charge.application_fee,
                "created": created,
            },
        )

        return ServiceResult.success(
            BookingPayment(
                payment_intent=payment_intent,
                booking=booking,
                charge=charge,
                client_secret=result.client_secret or "",
            )
        )

    @classmethod
    def refresh_payment(
        cls, seeker: User, stripe_payment_intent_id: str
    ) -> ServiceResult[PaymentIntent]:
        """
        Re-read an intent from Stripe and apply it like a webhook would.

        Args:
            seeker: Owner of the payment intent
            stripe_payment_intent_id: Stripe PaymentIntent ID (pi_xxx)

        Returns:
            ServiceResult containing the refreshed PaymentIntent row
        """
        logger = cls.get_logger()
        extra = {"payment_intent_id": stripe_payment_intent_id, "seeker_id": seeker.pk}

        payment_intent = PaymentIntent.objects.filter(
            stripe_payment_intent_id=stripe_payment_intent_id,
            seeker=seeker,
        ).first()
        if payment_intent is None:
            return ServiceResult.from_exception(
                PaymentNotFoundError("Payment intent not found")
            )

        try:
            result = StripeAdapter.retrieve_payment_intent(stripe_payment_intent_id)
        except ProcessorError as exc:
            logger.error(
                "Could not refresh payment intent",
                extra={**extra, "booking_id": str(payment_intent.booking_id)},
            )
            return ServiceResult.from_exception(exc)

        cls.record_intent_state(
            payment_intent, result, payment_outcome_for_status(result.status)
        )
        logger.info("Payment intent refreshed", extra={**extra, "status": result.status})
        return ServiceResult.success(payment_intent)

    @classmethod
    def record_intent_state(
        cls,
        payment_intent: PaymentIntent,
        result: PaymentIntentResult,
        succeeded: bool | None,
    ) -> bool:
        """
        Overwrite the mirror with Stripe's state and drive the booking.

        Args:
            payment_intent: Mirror row to update
            result: Stripe's current view of the intent
            succeeded: Booking outcome to apply, or None to only update the mirror

        Returns:
            True if the booking transitioned
        """
        with cls.atomic():
            payment_intent.apply_remote_state(result)
            payment_intent.save()
            if payment_intent.latest_charge_id:
                # Transfers seen before the charge id was known
                unlinked = Transfer.objects.filter(
                    payment_intent__isnull=True,
                    source_transaction=payment_intent.latest_charge_id,
                )
                unlinked.filter(provider__isnull=True).update(
                    provider_id=payment_intent.provider_id
                )
                unlinked.update(payment_intent=payment_intent)
            if succeeded is None:
                return False
            return BookingService.apply_payment_outcome(payment_intent.booking_id, succeeded)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _check_preconditions(
        cls, seeker: User, listing: Listing, duration_months: int
    ) -> ConnectedAccount:
        if not listing.is_bookable:
            raise ListingUnavailableError(
                "Listing is not available for booking",
                details={"listing_id": str(listing.id)},
            )
        if listing.provider_id == seeker.pk:
            raise PaymentValidationError("You cannot book your own listing")
        if duration_months is None or duration_months < 1:
            raise PaymentValidationError("Duration must be at least one month")

        account = ConnectedAccount.objects.filter(provider_id=listing.provider_id).first()
        if account is None or not account.charges_enabled:
            raise ProviderPaymentNotReadyError(
                PROVIDER_NOT_READY_MESSAGE,
                details={"provider_id": listing.provider_id},
            )
        return account

    @classmethod
    def _start_checkout(
        cls,
        seeker: User,
        listing: Listing,
        check_in_date: date,
        duration_months: int,
        message: str,
    ) -> BookingRequest:
        try:
            return BookingService.start_checkout(
                seeker=seeker,
                listing=listing,
                requested_date=check_in_date,
                duration_months=duration_months,
                message=message,
            )
        except BookingStateError as exc:
            if exc.error_code == "BOOKING_ALREADY_CONFIRMED":
                raise BookingAlreadyConfirmedError(exc.message, details=exc.details) from exc
            raise

    @staticmethod
    def _intent_metadata(booking: BookingRequest, charge: BookingCharge) -> dict[str, str]:
        return {
            "bookingId": str(booking.id),
            "seekerId": str(booking.seeker_id),
            "providerId": str(booking.provider_id),
            "listingId": str(booking.listing_id),
            "type": "booking",
            "duration": str(charge.duration_months),
            "monthlyRent": str(charge.monthly_rent),
            "securityDeposit": str(charge.security_deposit),
        }
