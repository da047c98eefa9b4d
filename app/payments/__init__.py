"""
Payments app for Stripe Connect integration.

This app handles:
- Provider connected accounts (onboarding, refresh)
- Booking checkout via destination-charge payment intents
- Webhook event recording and processing
- Mirror tables for payment intents, transfers and payouts
- Earnings summary, payout eligibility and payout requests
- Periodic reconciliation tasks

Related apps:
    - bookings: BookingRequest lifecycle driven by payment outcomes
    - listings: Priced listings being booked
    - authentication: Seeker and provider users

Usage:
    from payments.services import PaymentOrchestrator

    result = PaymentOrchestrator.create_booking_payment(seeker, listing, check_in, 3)

    from payments.services import PayoutService

    result = PayoutService.request_payout(provider, Decimal("5000"))
"""
