"""
Factory Boy factories for payment test data.

This module provides factories for creating test instances of the payment
mirror models. Factories generate realistic Stripe-shaped ids while allowing
easy customization.

Usage:
    from payments.tests.factories import (
        ConnectedAccountFactory,
        PaymentIntentFactory,
        PayoutFactory,
        TransferFactory,
        WebhookEventFactory,
    )

    # Enabled account for a new provider
    account = ConnectedAccountFactory()

    # Intent for an existing booking
    intent = PaymentIntentFactory(booking=booking)

    # Paid payout for a provider
    payout = PayoutFactory(provider=provider, status=PayoutStatus.PAID)
"""

import uuid
from decimal import Decimal

import factory

from authentication.tests.factories import ProviderFactory
from bookings.states import BookingStatus
from bookings.tests.factories import BookingRequestFactory
from payments.adapters import (
    AccountSnapshot,
    BalanceResult,
    BalanceTransactionResult,
    PaymentIntentResult,
    PayoutResult,
)
from payments.models import ConnectedAccount, PaymentIntent, Payout, Transfer, WebhookEvent
from payments.state_machines import (
    ConnectedAccountStatus,
    PaymentIntentStatus,
    PayoutMethod,
    PayoutOrigin,
    PayoutStatus,
    TransferStatus,
    WebhookEventStatus,
)


class ConnectedAccountFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating ConnectedAccount instances.

    Default creates a fully enabled account.

    Example:
        # Still onboarding
        account = ConnectedAccountFactory(
            status=ConnectedAccountStatus.PENDING,
            charges_enabled=False,
            payouts_enabled=False,
        )
    """

    class Meta:
        model = ConnectedAccount

    provider = factory.SubFactory(ProviderFactory)
    stripe_account_id = factory.Sequence(lambda n: f"acct_test_{n}_{uuid.uuid4().hex[:8]}")
    charges_enabled = True
    payouts_enabled = True
    details_submitted = True
    requirements = factory.LazyFunction(
        lambda: {"currently_due": [], "eventually_due": [], "past_due": []}
    )
    status = ConnectedAccountStatus.ENABLED
    country = "IN"


class PaymentIntentFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating PaymentIntent instances.

    Default mirrors a 35000 INR booking at 3% commission, still awaiting
    payment, for a booking in pending_payment.
    """

    class Meta:
        model = PaymentIntent

    stripe_payment_intent_id = factory.Sequence(lambda n: f"pi_test_{n}_{uuid.uuid4().hex[:8]}")
    booking = factory.SubFactory(BookingRequestFactory, status=BookingStatus.PENDING_PAYMENT)
    seeker = factory.SelfAttribute("booking.seeker")
    provider = factory.SelfAttribute("booking.provider")
    listing = factory.SelfAttribute("booking.listing")
    amount = 35000
    currency = "inr"
    status = PaymentIntentStatus.REQUIRES_PAYMENT_METHOD
    commission_percentage = Decimal("3.00")
    application_fee_amount = 1050
    transfer_destination = factory.Sequence(lambda n: f"acct_dest_{n}")
    transfer_amount = 33950
    client_secret = factory.LazyAttribute(lambda obj: f"{obj.stripe_payment_intent_id}_secret")


class TransferFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Transfer

    stripe_transfer_id = factory.Sequence(lambda n: f"tr_test_{n}_{uuid.uuid4().hex[:8]}")
    provider = factory.SubFactory(ProviderFactory)
    amount = Decimal("33950.00")
    currency = "inr"
    status = TransferStatus.PENDING
    destination = factory.Sequence(lambda n: f"acct_dest_{n}")


class PayoutFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating Payout instances.

    Default creates a pending standard payout the provider requested.
    """

    class Meta:
        model = Payout

    stripe_payout_id = factory.Sequence(lambda n: f"po_test_{n}_{uuid.uuid4().hex[:8]}")
    provider = factory.SubFactory(ProviderFactory)
    stripe_account_id = factory.Sequence(lambda n: f"acct_test_{n}")
    amount = Decimal("5000.00")
    currency = "inr"
    method = PayoutMethod.STANDARD
    status = PayoutStatus.PENDING
    origin = PayoutOrigin.REQUESTED


class WebhookEventFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating WebhookEvent instances.

    Default creates a PENDING payment_intent.succeeded webhook.

    Example:
        # Failed webhook
        event = WebhookEventFactory(
            status=WebhookEventStatus.FAILED,
            error_message="Processing error",
            retry_count=3,
        )
    """

    class Meta:
        model = WebhookEvent

    stripe_event_id = factory.Sequence(lambda n: f"evt_test_{n}_{uuid.uuid4().hex[:8]}")
    event_type = "payment_intent.succeeded"
    payload = factory.LazyAttribute(
        lambda obj: {
            "id": obj.stripe_event_id,
            "type": obj.event_type,
            "data": {
                "object": {
                    "id": f"pi_{uuid.uuid4().hex}",
                    "object": "payment_intent",
                    "amount": 3500000,
                    "currency": "inr",
                    "status": "succeeded",
                }
            },
        }
    )
    status = WebhookEventStatus.PENDING


# =============================================================================
# Stripe Result Builders
# =============================================================================
# Adapter return values for tests that mock StripeAdapter.


def intent_result(
    id: str = "pi_test123",
    status: str = "requires_payment_method",
    amount: str = "35000",
    latest_charge_id: str | None = None,
    failure_message: str | None = None,
) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=id,
        status=status,
        amount=Decimal(amount),
        currency="inr",
        client_secret=f"{id}_secret_abc",
        latest_charge_id=latest_charge_id,
        failure_message=failure_message,
    )


def payout_result(
    id: str = "po_test123",
    status: str = "pending",
    amount: str = "5000.00",
    method: str = "standard",
    account_id: str | None = None,
) -> PayoutResult:
    return PayoutResult(
        id=id,
        status=status,
        amount=Decimal(amount),
        currency="inr",
        method=method,
        account_id=account_id,
    )


def balance_result(available: str = "10000.00", pending: str = "2500.00") -> BalanceResult:
    return BalanceResult(available=Decimal(available), pending=Decimal(pending), currency="inr")


def balance_transaction_result(
    id: str = "txn_test123",
    type: str = "payment",
    amount: str = "33950.00",
) -> BalanceTransactionResult:
    return BalanceTransactionResult(
        id=id,
        type=type,
        amount=Decimal(amount),
        fee=Decimal("0.00"),
        net=Decimal(amount),
        currency="inr",
        status="available",
    )


def account_snapshot(id: str = "acct_provider", **overrides) -> AccountSnapshot:
    fields = {
        "charges_enabled": True,
        "payouts_enabled": True,
        "details_submitted": True,
        "country": "IN",
    }
    fields.update(overrides)
    return AccountSnapshot(id=id, **fields)


def event_payload(
    event_type: str,
    obj: dict,
    event_id: str = "evt_test123",
    account: str | None = None,
) -> dict:
    """Verified Stripe event as returned by StripeAdapter.verify_webhook_signature."""
    payload = {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }
    if account:
        payload["account"] = account
    return payload
