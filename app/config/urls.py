"""
URL configuration for the booking payments service.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - JWT endpoints
        token/                     - Obtain token pair (POST)
        token/refresh/             - Refresh access token (POST)
    /api/v1/bookings/              - Booking endpoints
        (root)                     - Create booking request (POST)
        {id}/cancel/               - Cancel booking (POST)
        {id}/respond/              - Provider approves/rejects (POST)
    /api/v1/payments/              - Payment endpoints
        connect/onboard/           - Start provider onboarding (POST)
        connect/account/           - Connected account status (GET)
        intents/                   - Create booking payment (POST)
        intents/{id}/refresh/      - Refresh payment status (POST)
        summary/                   - Provider earnings summary (GET)
        payouts/                   - Payout eligibility/history (GET), request (POST)
    /api/v1/webhooks/stripe/       - Stripe webhook endpoint (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check
from payments.webhooks.views import stripe_webhook

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication (simplejwt token pair)
    path("auth/", include("authentication.urls")),
    # Bookings
    path("bookings/", include("bookings.urls")),
    # Payments
    path("payments/", include("payments.urls")),
    # Stripe webhooks (signature-authenticated, no session/JWT)
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Booking Payments Admin"
admin.site.site_title = "Booking Payments"
admin.site.index_title = "Bookings, payments and payouts"
