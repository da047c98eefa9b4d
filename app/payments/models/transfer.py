"""
Transfer model: local mirror of a Stripe Transfer.

Records money Stripe routed to a provider's connected account for one
payment intent. Inserted by transfer.created; status overwritten by
transfer.updated / transfer.reversed (last write wins).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import TransferStatus

if TYPE_CHECKING:
    from payments.adapters import TransferSnapshot


class Transfer(UUIDPrimaryKeyMixin, BaseModel):
    """
    Mirror of a transfer to a provider's connected account.

    Fields:
        stripe_transfer_id: Unique Stripe Transfer ID (tr_xxx)
        payment_intent: Intent whose charge funded the transfer
        provider: Receiving provider
        amount: Amount in currency units
        currency: ISO 4217 currency code
        status: Transfer status
        destination: Connected account (acct_xxx)
        source_transaction: Charge or intent the transfer was created from
        description: Transfer description
    """

    stripe_transfer_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Transfer ID (tr_xxx)",
    )
    payment_intent = models.ForeignKey(
        "payments.PaymentIntent",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transfers",
        help_text="Payment intent the transfer belongs to",
    )
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transfers",
        help_text="Provider receiving the transfer",
    )

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
    status = models.CharField(
        max_length=20,
        choices=TransferStatus.choices,
        default=TransferStatus.PENDING,
        db_index=True,
        help_text="Transfer status",
    )

    destination = models.CharField(
        max_length=255,
        help_text="Destination connected account (acct_xxx)",
    )
    source_transaction = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Source charge or payment intent",
    )
    description = models.CharField(
        max_length=255,
        blank=True,
        default="Transfer to provider",
        help_text="Transfer description",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Transfer"
        verbose_name_plural = "Transfers"
        indexes = [
            models.Index(fields=["provider", "status"], name="pay_tr_provider_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Transfer({self.stripe_transfer_id}, {self.status})"

    def apply_snapshot(self, snapshot: TransferSnapshot) -> None:
        """Overwrite status from Stripe's current state. Does not save."""
        if snapshot.status in TransferStatus.values:
            self.status = snapshot.status
        else:
            self.status = TransferStatus.PENDING
