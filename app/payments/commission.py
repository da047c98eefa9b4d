"""
Booking pricing and platform commission.

The commission percentage is read once per payment intent and snapshotted
onto the PaymentIntent row. Historical totals always use the snapshot,
never the live setting.

Usage:
    from payments.commission import BookingCharge, CommissionConfig

    charge = BookingCharge.price(listing, duration_months=3, commission=CommissionConfig.current())
    charge.amount           # 35000 for rent 10000, deposit 5000
    charge.application_fee  # 1050 at 3%
    charge.transfer_amount  # 33950
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from django.conf import settings

from core.settings_resolver import get_decimal

if TYPE_CHECKING:
    from listings.models import Listing

logger = logging.getLogger(__name__)

COMMISSION_SETTING_KEY = "booking.commission_percent"


def compute_application_fee(amount: int, percentage: Decimal) -> int:
    """
    Platform fee for an amount: round(amount * percentage / 100), half up.

    Always within [0, amount].
    """
    fee = (Decimal(amount) * Decimal(percentage) / 100).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return int(min(max(fee, Decimal(0)), Decimal(amount)))


@dataclass(frozen=True)
class CommissionConfig:
    """Platform commission percentage as read at one instant."""

    percentage: Decimal

    @classmethod
    def current(cls) -> CommissionConfig:
        """
        Read the commission from platform settings.

        Falls back to settings.PLATFORM_COMMISSION_PERCENT when the admin
        value is missing or outside 0-100.
        """
        fallback = Decimal(str(settings.PLATFORM_COMMISSION_PERCENT))
        percentage = get_decimal(COMMISSION_SETTING_KEY, default=fallback)

        if not percentage.is_finite() or not Decimal(0) <= percentage <= Decimal(100):
            logger.warning(
                "Commission setting out of range, using default",
                extra={"setting_key": COMMISSION_SETTING_KEY, "value": str(percentage)},
            )
            percentage = fallback

        return cls(percentage=percentage)

    def application_fee(self, amount: int) -> int:
        return compute_application_fee(amount, self.percentage)


@dataclass(frozen=True)
class BookingCharge:
    """
    Priced booking payment, all amounts in whole currency units.

    amount = monthly_rent * duration_months + security_deposit
    transfer_amount = amount - application_fee
    """

    monthly_rent: int
    duration_months: int
    security_deposit: int
    amount: int
    commission_percentage: Decimal
    application_fee: int
    transfer_amount: int

    @classmethod
    def price(
        cls,
        listing: Listing,
        duration_months: int,
        commission: CommissionConfig,
    ) -> BookingCharge:
        monthly_rent = listing.monthly_rent
        security_deposit = listing.effective_security_deposit
        amount = monthly_rent * duration_months + security_deposit
        fee = commission.application_fee(amount)

        return cls(
            monthly_rent=monthly_rent,
            duration_months=duration_months,
            security_deposit=security_deposit,
            amount=amount,
            commission_percentage=commission.percentage,
            application_fee=fee,
            transfer_amount=amount - fee,
        )
