"""
Ledger mirror read accessors.

This module provides the LedgerMirror class: balance-relevant aggregates and
listings computed on demand from the mirror tables (PaymentIntent,
Transfer, Payout). Nothing here is cached or stored; every call reads the
current rows, so there is no second copy that could go stale.

Historical totals use the amounts and commission snapshotted on each
PaymentIntent, never the live commission setting.

Usage:
    from payments.ledger import ledger_mirror

    summary = ledger_mirror.earnings_summary(provider)
    summary.total, summary.this_month, summary.pending

    page = ledger_mirror.payout_history(provider, page=2, limit=10)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from payments.models import PaymentIntent, Payout, Transfer

from .types import EarningsSummary, PayoutHistoryPage, RecentActivity

if TYPE_CHECKING:
    from datetime import datetime

    from authentication.models import User


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class LedgerMirror:
    """
    Read accessors over the payment mirror tables.

    All methods are static - the class holds no state. Use the
    ledger_mirror singleton for convenience.
    """

    @staticmethod
    def start_of_month(now: datetime | None = None) -> datetime:
        """Midnight on the first day of the current month, local time."""
        now = timezone.localtime(now or timezone.now())
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    @staticmethod
    def earnings_summary(provider: User) -> EarningsSummary:
        """
        Aggregate a provider's PaymentIntent rows.

        total and platform_fees cover succeeded intents; this_month is the
        succeeded total since the start of the calendar month; pending sums
        intents in requires_payment_method, requires_confirmation,
        requires_action or processing.
        """
        intents = PaymentIntent.objects.for_provider(provider)

        succeeded = intents.succeeded().aggregate(
            total=Sum("amount"),
            fees=Sum("application_fee_amount"),
        )
        this_month = (
            intents.succeeded()
            .filter(created_at__gte=LedgerMirror.start_of_month())
            .aggregate(total=Sum("amount"))
        )
        pending = intents.in_flight().aggregate(total=Sum("amount"))

        return EarningsSummary(
            total=succeeded["total"] or 0,
            this_month=this_month["total"] or 0,
            pending=pending["total"] or 0,
            platform_fees=succeeded["fees"] or 0,
            currency=settings.PAYMENT_CURRENCY,
        )

    @staticmethod
    def recent_activity(provider: User, limit: int = 5) -> RecentActivity:
        """Latest intents, transfers and payouts for a provider."""
        return RecentActivity(
            payment_intents=list(
                PaymentIntent.objects.for_provider(provider).order_by("-created_at")[:limit]
            ),
            transfers=list(
                Transfer.objects.filter(provider=provider).order_by("-created_at")[:limit]
            ),
            payouts=list(
                Payout.objects.filter(provider=provider).order_by("-created_at")[:limit]
            ),
        )

    @staticmethod
    def payout_history(
        provider: User,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> PayoutHistoryPage:
        """
        Paginated payouts for a provider, newest first.

        page is clamped to >= 1 and limit to 1..MAX_PAGE_SIZE.
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        payouts = Payout.objects.filter(provider=provider).order_by("-created_at")
        offset = (page - 1) * limit

        return PayoutHistoryPage(
            results=list(payouts[offset : offset + limit]),
            page=page,
            limit=limit,
            total=payouts.count(),
        )


# Singleton instance for convenience
ledger_mirror = LedgerMirror()
