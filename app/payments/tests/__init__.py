"""
Tests for payments app.

This package contains test modules for:
- test_commission.py: Booking pricing and platform commission
- test_models.py: Mirror model and queryset tests
- test_orchestrator.py: Checkout and payment refresh
- test_connected_account_service.py: Provider onboarding and refresh
- test_payout_service.py: Payout requests and eligibility
- test_ledger.py: Earnings and payout history reads
- test_events.py / test_handlers.py: Webhook parsing and handlers
- test_webhook_views.py: Stripe webhook endpoint
- test_tasks.py: Reconciliation Celery tasks
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_handlers.py
"""
