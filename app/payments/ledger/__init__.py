"""
Ledger mirror - read-optimized views over the payment mirror tables.

Public API:
    Service:
        ledger_mirror - Singleton instance of LedgerMirror
        LedgerMirror - Class with all read accessors

    Types:
        EarningsSummary - Provider earnings aggregates
        RecentActivity - Latest intents, transfers and payouts
        PayoutHistoryPage - One page of payout history

Usage:
    from payments.ledger import ledger_mirror

    summary = ledger_mirror.earnings_summary(provider)
    history = ledger_mirror.payout_history(provider, page=1, limit=10)
"""

from .services import LedgerMirror, ledger_mirror
from .types import EarningsSummary, PayoutHistoryPage, RecentActivity

__all__ = [
    "ledger_mirror",
    "LedgerMirror",
    "EarningsSummary",
    "PayoutHistoryPage",
    "RecentActivity",
]
