"""
URL configuration for the payments app.

Routes:
    - POST /connect/onboard/ - Start provider onboarding
    - GET  /connect/account/ - Connected account status
    - POST /intents/ - Create booking payment
    - POST /intents/<intent_id>/refresh/ - Refresh payment status
    - GET  /summary/ - Earnings summary
    - GET/POST /payouts/ - Payout eligibility/history and requests

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
The Stripe webhook is mounted by config.urls at /api/v1/webhooks/stripe/.
"""

from django.urls import path

from payments.views import (
    BookingPaymentView,
    ConnectAccountView,
    ConnectOnboardView,
    PaymentRefreshView,
    PaymentSummaryView,
    PayoutView,
)

app_name = "payments"

urlpatterns = [
    # Connected account
    path("connect/onboard/", ConnectOnboardView.as_view(), name="connect-onboard"),
    path("connect/account/", ConnectAccountView.as_view(), name="connect-account"),
    # Booking payments
    path("intents/", BookingPaymentView.as_view(), name="intent-create"),
    path(
        "intents/<str:intent_id>/refresh/",
        PaymentRefreshView.as_view(),
        name="intent-refresh",
    ),
    # Provider earnings
    path("summary/", PaymentSummaryView.as_view(), name="summary"),
    path("payouts/", PayoutView.as_view(), name="payouts"),
]
