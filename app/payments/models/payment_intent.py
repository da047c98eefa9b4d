"""
PaymentIntent model: local mirror of a Stripe PaymentIntent.

One row per attempted charge for a booking. The orchestrator creates the row
after Stripe returns the intent; afterwards only payment_intent.* events,
manual refresh and the reconciliation task change its status, by copying
Stripe's status verbatim.

Pricing fields are fixed at creation:
    amount = monthly_rent * duration + security_deposit
    application_fee_amount = round(amount * commission_percentage / 100)
    transfer_amount = amount - application_fee_amount

Usage:
    from payments.models import PaymentIntent

    intent = PaymentIntent.objects.get(stripe_payment_intent_id="pi_123")
    intent.apply_remote_state(result)
    intent.save()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentIntentStatus, PaymentPurpose

if TYPE_CHECKING:
    from payments.adapters import PaymentIntentResult


class PaymentIntentQuerySet(models.QuerySet):
    def for_provider(self, provider):
        return self.filter(provider=provider)

    def succeeded(self):
        return self.filter(status=PaymentIntentStatus.SUCCEEDED)

    def in_flight(self):
        return self.filter(status__in=PaymentIntentStatus.in_flight())


class PaymentIntent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Mirror of a Stripe PaymentIntent created for a booking.

    Fields:
        stripe_payment_intent_id: Unique Stripe ID (pi_xxx)
        booking: Booking the charge pays for
        seeker / provider / listing: Parties, copied from the booking
        amount: Total charge in whole currency units
        currency: ISO 4217 currency code
        status: Stripe's status, copied verbatim
        purpose: What the charge is for
        commission_percentage: Commission snapshot used for the fee
        application_fee_amount: Platform fee in whole currency units
        transfer_destination: Provider's connected account (acct_xxx)
        transfer_amount: Amount routed to the provider
        latest_charge_id: Charge of the last confirmation attempt (ch_xxx)
        client_secret: Token the frontend uses to confirm the payment
        failure_message: Last payment error reported by Stripe
        metadata: Metadata sent to Stripe
    """

    stripe_payment_intent_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe PaymentIntent ID (pi_xxx)",
    )

    # ==========================================================================
    # Relationships
    # ==========================================================================

    booking = models.ForeignKey(
        "bookings.BookingRequest",
        on_delete=models.PROTECT,
        related_name="payment_intents",
        help_text="Booking this payment is for",
    )
    seeker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payment_intents",
        help_text="Seeker being charged",
    )
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_payment_intents",
        help_text="Provider receiving the transfer",
    )
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.PROTECT,
        related_name="payment_intents",
        help_text="Listing being paid for",
    )

    # ==========================================================================
    # Amount & Status
    # ==========================================================================

    amount = models.PositiveIntegerField(
        help_text="Total charge in whole currency units",
    )
    currency = models.CharField(
        max_length=3,
        default="inr",
        help_text="ISO 4217 currency code (lowercase)",
    )
    status = models.CharField(
        max_length=32,
        choices=PaymentIntentStatus.choices,
        default=PaymentIntentStatus.REQUIRES_PAYMENT_METHOD,
        db_index=True,
        help_text="Stripe's status for this intent",
    )
    purpose = models.CharField(
        max_length=32,
        choices=PaymentPurpose.choices,
        default=PaymentPurpose.BOOKING_FEE,
        help_text="What the payment is for",
    )

    # ==========================================================================
    # Commission & Transfer
    # ==========================================================================

    commission_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        help_text="Commission percentage snapshotted at creation",
    )
    application_fee_amount = models.PositiveIntegerField(
        help_text="Platform fee in whole currency units",
    )
    transfer_destination = models.CharField(
        max_length=255,
        help_text="Destination connected account (acct_xxx)",
    )
    transfer_amount = models.PositiveIntegerField(
        help_text="Amount routed to the provider in whole currency units",
    )

    # ==========================================================================
    # Stripe Details
    # ==========================================================================

    latest_charge_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        db_index=True,
        help_text="Latest Charge ID (ch_xxx); transfers reference it as source",
    )
    client_secret = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Client secret for frontend confirmation",
    )
    failure_message = models.TextField(
        blank=True,
        default="",
        help_text="Last payment error reported by Stripe",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Metadata attached to the Stripe intent",
    )

    objects = PaymentIntentQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment Intent"
        verbose_name_plural = "Payment Intents"
        indexes = [
            models.Index(fields=["provider", "status"], name="pay_pi_provider_status_idx"),
            models.Index(fields=["seeker", "status"], name="pay_pi_seeker_status_idx"),
            models.Index(fields=["status", "updated_at"], name="pay_pi_status_updated_idx"),
        ]

    def __str__(self) -> str:
        return f"PaymentIntent({self.stripe_payment_intent_id}, {self.status})"

    @property
    def is_in_flight(self) -> bool:
        return self.status in PaymentIntentStatus.in_flight()

    def apply_remote_state(self, result: PaymentIntentResult) -> None:
        """
        Copy Stripe's current status (and charge/failure details) onto the row.

        Note: Does not save - caller must save after calling.
        """
        self.status = result.status
        if result.latest_charge_id:
            self.latest_charge_id = result.latest_charge_id
        if result.failure_message:
            self.failure_message = result.failure_message
