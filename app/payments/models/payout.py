"""
Payout model: local mirror of a Stripe Payout from a connected account.

A Payout moves money from a provider's connected account balance to their
bank. Rows have two possible origins and are deduplicated only by the
Stripe payout id:

    REQUESTED: written by PayoutService after Stripe returns the payout
    PROCESSOR: inserted by a payout.created event whose id is unknown
               (automatic payouts, or a request whose response was lost)

Status is overwritten from payout.* events (last write wins):
    pending → in_transit → paid
    pending/in_transit → failed | canceled

Usage:
    from payments.models import Payout

    payout = Payout.objects.filter(stripe_payout_id="po_123").first()
    if payout:
        payout.apply_result(result)
        payout.save()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PayoutMethod, PayoutOrigin, PayoutStatus

if TYPE_CHECKING:
    from payments.adapters import PayoutResult


class Payout(UUIDPrimaryKeyMixin, BaseModel):
    """
    Represents a payout from a provider's connected account to their bank.

    Fields:
        stripe_payout_id: Unique Stripe Payout ID (po_xxx)
        provider: Provider owning the connected account, if known
        stripe_account_id: Connected account the payout was made from
        amount: Amount in currency units
        currency: ISO 4217 currency code
        method: standard or instant
        status: Stripe's payout status
        origin: Which side first recorded the row
        description: Payout description
        arrival_date: Estimated arrival date reported by Stripe
        failure_code / failure_message: Failure details from Stripe
        metadata: Metadata sent with the request
    """

    stripe_payout_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Payout ID (po_xxx)",
    )
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payouts",
        help_text="Provider receiving the payout",
    )
    stripe_account_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Connected account the payout was made from (acct_xxx)",
    )

    # ==========================================================================
    # Amount & Status
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Amount in currency units",
    )
    currency = models.CharField(
        max_length=3,
        default="inr",
        help_text="ISO 4217 currency code (lowercase)",
    )
    method = models.CharField(
        max_length=20,
        choices=PayoutMethod.choices,
        default=PayoutMethod.STANDARD,
        help_text="Payout speed",
    )
    status = models.CharField(
        max_length=20,
        choices=PayoutStatus.choices,
        default=PayoutStatus.PENDING,
        db_index=True,
        help_text="Stripe's payout status",
    )
    origin = models.CharField(
        max_length=20,
        choices=PayoutOrigin.choices,
        default=PayoutOrigin.REQUESTED,
        help_text="Whether the row came from a request or a Stripe event",
    )

    # ==========================================================================
    # Details
    # ==========================================================================

    description = models.CharField(
        max_length=255,
        blank=True,
        default="Payout to bank account",
        help_text="Payout description",
    )
    arrival_date = models.DateField(
        null=True,
        blank=True,
        help_text="Estimated arrival date",
    )
    failure_code = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Stripe failure code",
    )
    failure_message = models.TextField(
        blank=True,
        default="",
        help_text="Stripe failure message",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Metadata attached to the payout",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payout"
        verbose_name_plural = "Payouts"
        indexes = [
            models.Index(fields=["provider", "status"], name="pay_po_provider_status_idx"),
            models.Index(fields=["provider", "created_at"], name="pay_po_provider_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Payout({self.stripe_payout_id}, {self.status})"

    @property
    def is_paid(self) -> bool:
        return self.status == PayoutStatus.PAID

    def apply_result(self, result: PayoutResult) -> None:
        """
        Overwrite status, arrival date and failure details from Stripe.

        Note: Does not save - caller must save after calling.
        """
        if result.status in PayoutStatus.values:
            self.status = result.status
        if result.arrival_date:
            self.arrival_date = result.arrival_date
        if result.failure_code:
            self.failure_code = result.failure_code
        if result.failure_message:
            self.failure_message = result.failure_message
