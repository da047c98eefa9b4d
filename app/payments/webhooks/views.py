"""
Webhook endpoint view for Stripe.

The view:
1. Verifies the webhook signature
2. Creates/retrieves the WebhookEvent record (idempotent)
3. Processes the event synchronously
4. Answers 200 on success or no-op, 400 on a bad signature and 500 on a
   processing failure so that Stripe redelivers

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import StripeAdapter
from payments.exceptions import InvalidSignatureError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.webhooks.handlers import process_webhook_event

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive, verify and apply a Stripe webhook event.

    Security:
    - Signature verification prevents spoofed webhooks; nothing is written
      before it passes
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - WebhookEvent.stripe_event_id is unique
    - An event already PROCESSED is acknowledged without re-dispatch
    - Handlers tolerate re-entry, so a redelivered FAILED event is retried

    Returns:
        HttpResponse with status:
        - 200: Event applied, ignored, or already processed
        - 400: Missing/invalid signature or malformed event
        - 500: Processing failed (Stripe will redeliver)

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    payload = request.body
    signature = request.headers.get("Stripe-Signature", "")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return HttpResponse("Missing signature", status=400)

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET is not configured")
        return HttpResponse("Webhook secret not configured", status=500)

    # Step 1: Verify signature
    try:
        event_data = StripeAdapter.verify_webhook_signature(payload, signature)
    except InvalidSignatureError as e:
        logger.error(
            "Webhook signature verification failed",
            extra={"error": e.details.get("error"), "remote_addr": request.META.get("REMOTE_ADDR")},
        )
        return HttpResponse("Invalid signature", status=400)

    stripe_event_id = event_data.get("id")
    event_type = event_data.get("type")

    if not stripe_event_id or not event_type:
        logger.warning("Webhook missing required fields")
        return HttpResponse("Invalid event", status=400)

    logger.info(
        f"Received Stripe webhook: {event_type}",
        extra={"stripe_event_id": stripe_event_id, "event_type": event_type},
    )

    # Step 2: Create/get WebhookEvent (idempotent)
    webhook_event, created = WebhookEvent.objects.get_or_create(
        stripe_event_id=stripe_event_id,
        defaults={
            "event_type": event_type,
            "payload": event_data,
            "status": WebhookEventStatus.PENDING,
        },
    )

    if not created and webhook_event.is_processed:
        logger.info(
            "Webhook already processed, returning success",
            extra={"stripe_event_id": stripe_event_id},
        )
        return HttpResponse("Already processed", status=200)

    # Step 3: Apply
    try:
        process_webhook_event(webhook_event)
    except Exception:
        # Already logged and marked FAILED; Stripe redelivers on 5xx
        return HttpResponse("Webhook processing failed", status=500)

    return HttpResponse("Processed", status=200)
