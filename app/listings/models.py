"""
Listing model.

Only the fields the booking/payment flow reads are modelled here.

Usage:
    from listings.models import Listing

    listing = Listing.objects.create(
        provider=provider,
        title="Room near campus",
        monthly_rent=10000,
        security_deposit=5000,
        is_active=True,
        is_approved=True,
    )
    listing.effective_security_deposit  # 5000
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class Listing(UUIDPrimaryKeyMixin, BaseModel):
    """
    A room offered by a provider.

    Fields:
        provider: Owning provider
        title: Display title
        monthly_rent: Rent per month in whole currency units
        security_deposit: One-off deposit; None means one month's rent
        is_active: Provider has the listing switched on
        is_approved: Platform moderation approved the listing
    """

    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="listings",
        help_text="Provider who owns this listing",
    )
    title = models.CharField(
        max_length=200,
        help_text="Listing title",
    )
    monthly_rent = models.PositiveIntegerField(
        help_text="Monthly rent in whole currency units",
    )
    security_deposit = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Security deposit in whole currency units (defaults to one month's rent)",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether the provider has the listing switched on",
    )
    is_approved = models.BooleanField(
        default=False,
        help_text="Whether platform moderation approved the listing",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Listing"
        verbose_name_plural = "Listings"

    def __str__(self) -> str:
        return f"Listing({self.title})"

    @property
    def is_bookable(self) -> bool:
        """Active and approved listings can be booked and paid for."""
        return self.is_active and self.is_approved

    @property
    def effective_security_deposit(self) -> int:
        """Deposit charged at checkout; one month's rent when none is set."""
        if self.security_deposit is None:
            return self.monthly_rent
        return self.security_deposit
