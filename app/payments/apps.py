"""
Payments app configuration.

This app provides the booking payment infrastructure:
- Stripe Connect onboarding for providers
- Destination-charge payment intents with platform commission
- Webhook ingestion into the mirror tables
- Provider earnings, payout eligibility and payout requests
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
