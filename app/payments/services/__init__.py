"""
Payment services for coordinating payment operations.

This module provides:
- PaymentOrchestrator: Booking checkout and payment refresh
- ConnectedAccountService: Provider onboarding and account refresh
- PayoutService: Payout requests and eligibility

Usage:
    from payments.services import PaymentOrchestrator

    result = PaymentOrchestrator.create_booking_payment(
        seeker=user,
        listing=listing,
        check_in_date=date(2026, 1, 1),
        duration_months=3,
    )

    from payments.services import PayoutService

    result = PayoutService.request_payout(provider, Decimal("5000"))
"""

from payments.services.connected_account_service import (
    ConnectedAccountService,
    OnboardingLink,
)
from payments.services.payment_orchestrator import (
    BookingPayment,
    PaymentOrchestrator,
    payment_outcome_for_status,
)
from payments.services.payout_service import PayoutEligibility, PayoutService

__all__ = [
    "BookingPayment",
    "ConnectedAccountService",
    "OnboardingLink",
    "PaymentOrchestrator",
    "PayoutEligibility",
    "PayoutService",
    "payment_outcome_for_status",
]
