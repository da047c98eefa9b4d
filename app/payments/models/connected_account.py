"""
ConnectedAccount model for Stripe Connect integration.

Mirror of a provider's Express account at Stripe. Exactly zero or one per
provider. Created when the provider starts onboarding; afterwards it is only
written from account.updated events or an explicit refresh read, both of
which overwrite the whole snapshot (last write wins).

Usage:
    from payments.models import ConnectedAccount

    account = ConnectedAccount.objects.filter(provider=provider).first()
    if account is None or not account.charges_enabled:
        raise ProviderPaymentNotReadyError(...)

    # After an account.updated event or a refresh read
    account.apply_snapshot(snapshot)
    account.save()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import ConnectedAccountStatus

if TYPE_CHECKING:
    from payments.adapters import AccountSnapshot


def derive_account_status(
    charges_enabled: bool,
    disabled_reason: str | None,
    past_due: list[str],
) -> str:
    """
    Collapse Stripe's capability flags into pending/restricted/enabled.

    ENABLED when charges are enabled; RESTRICTED when Stripe disabled the
    account or requirements are past due; PENDING otherwise.
    """
    if charges_enabled:
        return ConnectedAccountStatus.ENABLED
    if disabled_reason or past_due:
        return ConnectedAccountStatus.RESTRICTED
    return ConnectedAccountStatus.PENDING


class ConnectedAccount(UUIDPrimaryKeyMixin, BaseModel):
    """
    Represents a provider's Stripe Connected Account.

    Fields:
        provider: OneToOne link to the provider user
        stripe_account_id: Unique Stripe Account ID (acct_xxx)
        charges_enabled: Whether Stripe accepts charges destined to this account
        payouts_enabled: Whether Stripe allows payouts from this account
        details_submitted: Whether the provider finished the onboarding form
        requirements: Outstanding requirement lists (currently/eventually/past due)
        disabled_reason: Stripe's reason for disabling the account, if any
        status: Derived pending/restricted/enabled
        country: Account country

    Properties:
        requires_verification: True while requirements are currently due
    """

    provider = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="connected_account",
        help_text="Provider this connected account belongs to",
    )

    stripe_account_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Connect Account ID (acct_xxx)",
    )

    # ==========================================================================
    # Capability Flags
    # ==========================================================================

    charges_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled charges for this account",
    )
    payouts_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled payouts for this account",
    )
    details_submitted = models.BooleanField(
        default=False,
        help_text="Whether the provider submitted onboarding details",
    )

    requirements = models.JSONField(
        default=dict,
        blank=True,
        help_text="Outstanding requirements: currently_due, eventually_due, past_due",
    )
    disabled_reason = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Stripe's disabled_reason, empty when not disabled",
    )

    status = models.CharField(
        max_length=20,
        choices=ConnectedAccountStatus.choices,
        default=ConnectedAccountStatus.PENDING,
        db_index=True,
        help_text="Derived account status",
    )

    country = models.CharField(
        max_length=2,
        blank=True,
        default="",
        help_text="Two-letter account country",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Connected Account"
        verbose_name_plural = "Connected Accounts"

    def __str__(self) -> str:
        return f"ConnectedAccount({self.stripe_account_id}, {self.status})"

    @property
    def requires_verification(self) -> bool:
        return bool((self.requirements or {}).get("currently_due"))

    def apply_snapshot(self, snapshot: AccountSnapshot) -> None:
        """
        Overwrite flags, requirements and status from Stripe's current state.

        Note: Does not save - caller must save after calling.
        """
        self.charges_enabled = snapshot.charges_enabled
        self.payouts_enabled = snapshot.payouts_enabled
        self.details_submitted = snapshot.details_submitted
        self.requirements = {
            "currently_due": snapshot.currently_due,
            "eventually_due": snapshot.eventually_due,
            "past_due": snapshot.past_due,
        }
        self.disabled_reason = snapshot.disabled_reason or ""
        self.status = derive_account_status(
            snapshot.charges_enabled,
            snapshot.disabled_reason,
            snapshot.past_due,
        )
        if snapshot.country:
            self.country = snapshot.country
