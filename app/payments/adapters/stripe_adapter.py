"""
Stripe API adapter for payment operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling, timeouts, idempotency,
and observability.

Features:
- Configurable timeouts on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency support for safe retries
- Amount conversion between whole currency units and Stripe's minor units

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_WEBHOOK_SECRET: Webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    result = StripeAdapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount=35000,
            currency="inr",
            destination_account_id="acct_123",
            application_fee_amount=1050,
            idempotency_key="create_intent:booking_123:1:a1b2c3d4",
            metadata={"bookingId": str(booking.id)},
        )
    )

    balance = StripeAdapter.retrieve_balance("acct_123")
    balance.available  # Decimal("350.00")
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Generic, TypeVar

import requests
import stripe
from django.conf import settings

from payments.exceptions import (
    InvalidSignatureError,
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
    StripeTimeoutError,
)

T = TypeVar("T")

# Stripe amounts are in the smallest currency unit (paise for INR)
MINOR_UNITS_PER_UNIT = 100


def to_minor_units(amount: int | Decimal) -> int:
    """Convert whole currency units to Stripe's smallest unit."""
    return int(Decimal(amount) * MINOR_UNITS_PER_UNIT)


def from_minor_units(amount: int | None) -> Decimal:
    """Convert Stripe's smallest unit to a currency-unit Decimal."""
    return (Decimal(amount or 0) / MINOR_UNITS_PER_UNIT).quantize(Decimal("0.01"))


def as_dict(stripe_object: Any) -> dict[str, Any]:
    """
    Plain dict view of a Stripe object (or a dict already).

    StripeObject subclasses dict, so nested objects keep working with
    ``.get``. Its to_dict helpers are deprecated.
    """
    if stripe_object is None:
        return {}
    return dict(stripe_object)


def _timestamp_to_date(value: int | None) -> date | None:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).date()


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreatePaymentIntentParams:
    """
    Parameters for creating a destination-charge PaymentIntent.

    Attributes:
        amount: Total charge in whole currency units
        currency: ISO 4217 currency code
        destination_account_id: Provider's connected account (acct_xxx)
        application_fee_amount: Platform commission in whole currency units
        idempotency_key: Unique key for idempotent creation
        metadata: Key-value pairs to attach to the PaymentIntent
    """

    amount: int
    currency: str
    destination_account_id: str
    application_fee_amount: int
    idempotency_key: str
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.amount <= 0:
            raise ValueError("amount must be positive")
        if not 0 <= self.application_fee_amount <= self.amount:
            raise ValueError("application_fee_amount must be between 0 and amount")
        if not self.destination_account_id:
            raise ValueError("destination_account_id is required")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")


@dataclass
class AccountSnapshot:
    """
    Current state of a connected account as reported by Stripe.

    Built from Account API responses and from account.updated events,
    so both update the mirror through the same fields.
    """

    id: str
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False
    currently_due: list[str] = field(default_factory=list)
    eventually_due: list[str] = field(default_factory=list)
    past_due: list[str] = field(default_factory=list)
    disabled_reason: str | None = None
    country: str | None = None
    email: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> AccountSnapshot:
        requirements = data.get("requirements") or {}
        return cls(
            id=data["id"],
            charges_enabled=bool(data.get("charges_enabled")),
            payouts_enabled=bool(data.get("payouts_enabled")),
            details_submitted=bool(data.get("details_submitted")),
            currently_due=list(requirements.get("currently_due") or []),
            eventually_due=list(requirements.get("eventually_due") or []),
            past_due=list(requirements.get("past_due") or []),
            disabled_reason=requirements.get("disabled_reason"),
            country=data.get("country"),
            email=data.get("email"),
        )


@dataclass
class PaymentIntentResult:
    """
    Result from Stripe PaymentIntent operations.

    Attributes:
        id: PaymentIntent ID (pi_xxx)
        status: Current status (requires_payment_method, succeeded, etc.)
        amount: Amount in whole currency units
        currency: Currency code
        client_secret: Secret for client-side confirmation
        latest_charge_id: Charge created by the last confirmation attempt
        failure_message: Last payment error message, if any
        metadata: Attached metadata
    """

    id: str
    status: str
    amount: Decimal
    currency: str
    client_secret: str | None = None
    latest_charge_id: str | None = None
    failure_message: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> PaymentIntentResult:
        last_error = data.get("last_payment_error") or {}
        latest_charge = data.get("latest_charge")
        if isinstance(latest_charge, dict):
            latest_charge = latest_charge.get("id")
        return cls(
            id=data["id"],
            status=data.get("status") or "",
            amount=from_minor_units(data.get("amount")),
            currency=data.get("currency") or "",
            client_secret=data.get("client_secret"),
            latest_charge_id=latest_charge,
            failure_message=last_error.get("message"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class TransferSnapshot:
    """
    Current state of a Transfer to a connected account.

    Stripe transfers carry no status of their own beyond ``reversed``; an
    explicit ``status`` is honoured when present, otherwise the transfer is
    pending until reversed.
    """

    id: str
    amount: Decimal
    currency: str
    destination: str
    source_transaction: str | None = None
    description: str | None = None
    status: str = "pending"
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> TransferSnapshot:
        if data.get("reversed"):
            status = "reversed"
        else:
            status = data.get("status") or "pending"
        destination = data.get("destination")
        if isinstance(destination, dict):
            destination = destination.get("id")
        return cls(
            id=data["id"],
            amount=from_minor_units(data.get("amount")),
            currency=data.get("currency") or "",
            destination=destination or "",
            source_transaction=data.get("source_transaction"),
            description=data.get("description"),
            status=status,
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class PayoutResult:
    """
    Result from Stripe Payout operations.

    Attributes:
        id: Payout ID (po_xxx)
        status: pending, in_transit, paid, failed or canceled
        amount: Amount in currency units
        currency: Currency code
        method: standard or instant
        arrival_date: Expected arrival date
        account_id: Connected account the payout left from (events only)
        failure_code: Stripe failure code for failed payouts
        failure_message: Human-readable failure reason
    """

    id: str
    status: str
    amount: Decimal
    currency: str
    method: str = "standard"
    arrival_date: date | None = None
    description: str | None = None
    account_id: str | None = None
    failure_code: str | None = None
    failure_message: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any], account_id: str | None = None) -> PayoutResult:
        return cls(
            id=data["id"],
            status=data.get("status") or "pending",
            amount=from_minor_units(data.get("amount")),
            currency=data.get("currency") or "",
            method="instant" if data.get("method") == "instant" else "standard",
            arrival_date=_timestamp_to_date(data.get("arrival_date")),
            description=data.get("description"),
            account_id=account_id,
            failure_code=data.get("failure_code"),
            failure_message=data.get("failure_message"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class BalanceResult:
    """Balance of a connected account, in currency units."""

    available: Decimal
    pending: Decimal
    currency: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> BalanceResult:
        available = data.get("available") or []
        pending = data.get("pending") or []
        currency = None
        if available:
            currency = available[0].get("currency")
        return cls(
            available=from_minor_units(sum(entry.get("amount", 0) for entry in available)),
            pending=from_minor_units(sum(entry.get("amount", 0) for entry in pending)),
            currency=currency,
        )


@dataclass
class BalanceTransactionResult:
    """
    One entry of a connected account's balance history.

    Attributes:
        id: Balance transaction ID (txn_xxx)
        type: charge, payment, payout, transfer, adjustment...
        amount: Gross amount in currency units (negative for debits)
        fee: Stripe fees in currency units
        net: Amount minus fees
        status: available or pending
        available_on: When the funds become available
        source: Object that caused the entry (py_xxx, po_xxx...)
    """

    id: str
    type: str
    amount: Decimal
    fee: Decimal
    net: Decimal
    currency: str
    status: str
    created: datetime | None = None
    available_on: date | None = None
    description: str | None = None
    source: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> BalanceTransactionResult:
        source = data.get("source")
        if isinstance(source, dict):
            source = source.get("id")
        created = data.get("created")
        return cls(
            id=data["id"],
            type=data.get("type") or "",
            amount=from_minor_units(data.get("amount")),
            fee=from_minor_units(data.get("fee")),
            net=from_minor_units(data.get("net")),
            currency=data.get("currency") or "",
            status=data.get("status") or "pending",
            created=datetime.fromtimestamp(created, tz=timezone.utc) if created else None,
            available_on=_timestamp_to_date(data.get("available_on")),
            description=data.get("description"),
            source=source,
        )


@dataclass
class StripeListPage(Generic[T]):
    """One page of a Stripe list call; pass ``next_cursor`` as starting_after."""

    items: list[T]
    has_more: bool = False

    @property
    def next_cursor(self) -> str | None:
        if not self.has_more or not self.items:
            return None
        return self.items[-1].id


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    The hash component provides uniqueness across service restarts
    while the structured format aids debugging and correlation.

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation="create_intent",
            entity_id=booking.id,
            attempt=str(booking.updated_at.timestamp()),
        )
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str | int,
        attempt: int | str = 1,
    ) -> str:
        """
        Generate a unique idempotency key.

        Args:
            operation: The Stripe operation (create_intent, payout, etc.)
            entity_id: The domain entity ID (booking id, provider id)
            attempt: Distinguishes deliberate repeats of the same operation

        Returns:
            Formatted idempotency key string
        """
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are classmethods - no instance state is maintained.
    Thread-safe for use from Celery workers.

    Amount arguments are whole currency units; the adapter converts to
    Stripe's minor units on the way out and back to currency units on the
    way in.

    Usage:
        account = StripeAdapter.create_connected_account(provider.id, provider.email, "IN")
        result = StripeAdapter.create_payment_intent(params)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    # Built once; each RequestsClient owns a requests session
    _http_client = None

    @classmethod
    def _configure_stripe(cls) -> None:
        """Configure Stripe client with API key and timeout."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        if cls._http_client is None:
            timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
            cls._http_client = stripe.RequestsClient(timeout=timeout)
        stripe.default_http_client = cls._http_client

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Connected Accounts
    # =========================================================================

    @classmethod
    def create_connected_account(
        cls,
        provider_id: int | str,
        email: str,
        country: str,
        idempotency_key: str | None = None,
    ) -> AccountSnapshot:
        """
        Create an Express connected account for a provider.

        Args:
            provider_id: Local provider id (stored as metadata.providerId)
            email: Provider's email
            country: Two-letter country code
            idempotency_key: Optional key so a retried onboarding reuses the account

        Returns:
            AccountSnapshot of the new account (nothing enabled yet)
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_connected_account",
            "provider_id": provider_id,
            "country": country,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            account = stripe.Account.create(
                type="express",
                country=country,
                email=email,
                metadata={"providerId": str(provider_id)},
                capabilities={
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "account_id": account.id, "duration_ms": duration_ms},
            )

            return AccountSnapshot.from_payload(as_dict(account))

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_account_link(
        cls,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> str:
        """
        Create a hosted onboarding link for a connected account.

        Returns:
            The onboarding URL (single use, short-lived)
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "create_account_link", "account_id": account_id}

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            link = stripe.AccountLink.create(
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )

            return link.url

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_account(cls, account_id: str) -> AccountSnapshot:
        """
        Read capability flags and outstanding requirements for an account.

        Raises:
            StripeInvalidAccountError: Account does not exist or is not ours
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "retrieve_account", "account_id": account_id}

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            account = stripe.Account.retrieve(account_id)

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "charges_enabled": account.charges_enabled,
                    "payouts_enabled": account.payouts_enabled,
                    "duration_ms": duration_ms,
                },
            )

            return AccountSnapshot.from_payload(as_dict(account))

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Payment Intents
    # =========================================================================

    @classmethod
    def create_payment_intent(
        cls,
        params: CreatePaymentIntentParams,
        trace_id: str | None = None,
    ) -> PaymentIntentResult:
        """
        Create a destination-charge PaymentIntent.

        The platform keeps ``application_fee_amount``; Stripe transfers the
        rest to ``destination_account_id`` once the charge succeeds.

        Args:
            params: Parameters for creating the PaymentIntent
            trace_id: Optional trace ID (booking id) for log correlation

        Returns:
            PaymentIntentResult including client_secret

        Raises:
            StripeInvalidAccountError: Destination account unusable
            StripeInvalidRequestError: Invalid parameters
            StripeAPIUnavailableError: Stripe service unavailable
            StripeTimeoutError: Request timed out
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_payment_intent",
            "amount": params.amount,
            "application_fee_amount": params.application_fee_amount,
            "currency": params.currency,
            "destination_account_id": params.destination_account_id,
            "idempotency_key": params.idempotency_key,
            "trace_id": trace_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(params.amount),
                currency=params.currency,
                application_fee_amount=to_minor_units(params.application_fee_amount),
                transfer_data={"destination": params.destination_account_id},
                metadata=params.metadata,
                idempotency_key=params.idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "payment_intent_id": intent.id,
                    "status": intent.status,
                    "duration_ms": duration_ms,
                },
            )

            return PaymentIntentResult.from_payload(as_dict(intent))

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_payment_intent(
        cls,
        payment_intent_id: str,
        trace_id: str | None = None,
    ) -> PaymentIntentResult:
        """
        Retrieve a PaymentIntent by ID.

        Used by manual refresh and by the reconciliation task.
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "retrieve_payment_intent",
            "payment_intent_id": payment_intent_id,
            "trace_id": trace_id,
        }

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={**log_context, "status": intent.status, "duration_ms": duration_ms},
            )

            return PaymentIntentResult.from_payload(as_dict(intent))

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Balance & Payouts
    # =========================================================================

    @classmethod
    def retrieve_balance(cls, account_id: str) -> BalanceResult:
        """
        Read the live balance of a connected account.

        Never served from the mirror: payout eligibility depends on it.
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "retrieve_balance", "account_id": account_id}

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            balance = stripe.Balance.retrieve(stripe_account=account_id)

            result = BalanceResult.from_payload(as_dict(balance))
            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "available": str(result.available),
                    "duration_ms": duration_ms,
                },
            )
            return result

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_payout(
        cls,
        account_id: str,
        amount: Decimal,
        currency: str,
        method: str,
        idempotency_key: str,
        metadata: dict[str, str] | None = None,
        description: str | None = None,
    ) -> PayoutResult:
        """
        Pay out a connected account's balance to its external bank account.

        Args:
            account_id: Connected account (acct_xxx)
            amount: Amount in currency units
            currency: Currency code
            method: "standard" or "instant"
            idempotency_key: Unique key for idempotent creation
            metadata: Optional metadata dict
            description: Statement description

        Returns:
            PayoutResult with id, status and arrival date
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_payout",
            "account_id": account_id,
            "amount": str(amount),
            "method": method,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            payout = stripe.Payout.create(
                amount=to_minor_units(amount),
                currency=currency,
                method=method,
                description=description,
                metadata=metadata or {},
                stripe_account=account_id,
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "payout_id": payout.id,
                    "status": payout.status,
                    "duration_ms": duration_ms,
                },
            )

            return PayoutResult.from_payload(as_dict(payout), account_id=account_id)

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def list_balance_transactions(
        cls,
        account_id: str,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> StripeListPage[BalanceTransactionResult]:
        """
        List a connected account's balance transactions, newest first.

        Args:
            account_id: Connected account (acct_xxx)
            limit: Page size (1-100)
            starting_after: Cursor from the previous page's next_cursor
        """
        page = cls._list(
            stripe.BalanceTransaction,
            "list_balance_transactions",
            account_id,
            limit,
            starting_after,
        )
        return StripeListPage(
            items=[BalanceTransactionResult.from_payload(as_dict(txn)) for txn in page["data"]],
            has_more=bool(page.get("has_more")),
        )

    @classmethod
    def list_payouts(
        cls,
        account_id: str,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> StripeListPage[PayoutResult]:
        """
        List a connected account's payouts as Stripe reports them, newest first.

        Includes automatic payouts Stripe created on its own schedule.
        """
        page = cls._list(stripe.Payout, "list_payouts", account_id, limit, starting_after)
        return StripeListPage(
            items=[
                PayoutResult.from_payload(as_dict(payout), account_id=account_id)
                for payout in page["data"]
            ],
            has_more=bool(page.get("has_more")),
        )

    @classmethod
    def _list(
        cls,
        resource: Any,
        operation: str,
        account_id: str,
        limit: int,
        starting_after: str | None,
    ) -> dict[str, Any]:
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": operation, "account_id": account_id, "limit": limit}
        params: dict[str, Any] = {"limit": limit, "stripe_account": account_id}
        if starting_after:
            params["starting_after"] = starting_after

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            page = as_dict(resource.list(**params))

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "count": len(page.get("data") or []),
                    "duration_ms": duration_ms,
                },
            )
            page.setdefault("data", [])
            return page

        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(
        cls,
        payload: bytes,
        signature: str,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes
            signature: Stripe-Signature header value

        Returns:
            Parsed event data dict

        Raises:
            InvalidSignatureError: Signature or payload invalid
        """
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                settings.STRIPE_WEBHOOK_SECRET,
            )
        except stripe.SignatureVerificationError as e:
            raise InvalidSignatureError(
                "Invalid webhook signature",
                details={"error": str(e)},
            ) from e
        except ValueError as e:
            raise InvalidSignatureError(
                "Invalid webhook payload",
                details={"error": str(e)},
            ) from e
        return as_dict(event)

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Maps Stripe SDK errors to appropriate domain exceptions
        with proper error categorization for retry decisions.

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInvalidAccountError: Invalid Connect account
            StripeInvalidRequestError: Invalid request parameters
            StripeRateLimitError: Rate limited
            StripeTimeoutError: Request timed out
            StripeAPIUnavailableError: API unavailable
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )
            raise StripeCardDeclinedError(
                str(error.user_message or error),
                stripe_code=error.code,
                decline_code=decline_code,
            )

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )

            if "account" in str(error).lower():
                raise StripeInvalidAccountError(
                    str(error.user_message or error),
                    stripe_code=error.code,
                )

            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            )

        elif isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            )

        elif isinstance(error, stripe.APIConnectionError):
            cause = error.__cause__ or error.__context__
            if isinstance(cause, requests.Timeout) or "timed out" in str(error).lower():
                logger.error("Stripe request timed out", extra=log_context)
                raise StripeTimeoutError(
                    "Payment processor did not respond in time. Please retry.",
                    stripe_code="timeout",
                )

            logger.error("Connection error to Stripe", extra=log_context, exc_info=True)
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            )

        elif isinstance(error, stripe.APIError):
            logger.error("Stripe API error", extra=log_context, exc_info=True)
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
            )

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeInvalidRequestError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            )

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                f"Unexpected Stripe error: {error}",
                stripe_code="unknown_error",
            )
