"""
Data types returned by the ledger mirror read accessors.

Types:
    EarningsSummary: Provider earnings aggregated from PaymentIntent rows
    RecentActivity: Latest intents, transfers and payouts for a provider
    PayoutHistoryPage: One page of a provider's payouts
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from payments.models import PaymentIntent, Payout, Transfer


@dataclass
class EarningsSummary:
    """
    Provider earnings in whole currency units.

    Attributes:
        total: Sum of succeeded intents (gross)
        this_month: Sum of succeeded intents created this calendar month
        pending: Sum of intents still in flight
        platform_fees: Commission retained on succeeded intents
        currency: Currency of the amounts
    """

    total: int = 0
    this_month: int = 0
    pending: int = 0
    platform_fees: int = 0
    currency: str = "inr"

    @property
    def net_total(self) -> int:
        return self.total - self.platform_fees


@dataclass
class RecentActivity:
    payment_intents: list[PaymentIntent] = field(default_factory=list)
    transfers: list[Transfer] = field(default_factory=list)
    payouts: list[Payout] = field(default_factory=list)


@dataclass
class PayoutHistoryPage:
    """
    One page of payouts, newest first.

    Attributes:
        results: Payouts on this page
        page: 1-based page number
        limit: Page size
        total: Number of payouts across all pages
    """

    results: list[Payout]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
