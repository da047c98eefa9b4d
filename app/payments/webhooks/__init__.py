"""
Webhook handling for payment events from Stripe.

This module provides the view and handlers for processing Stripe webhooks.
Webhooks are verified, recorded idempotently, parsed into typed event
variants and applied synchronously.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from payments.webhooks.handlers import (
    dispatch_webhook,
    process_webhook_event,
    register_handler,
)
from payments.webhooks.views import stripe_webhook

__all__ = [
    "dispatch_webhook",
    "process_webhook_event",
    "register_handler",
    "stripe_webhook",
]
