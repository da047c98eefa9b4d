"""
Tests for the Stripe webhook endpoint.

Tests cover:
- Signature checks before anything is written
- Event recording and idempotent redelivery
- Status codes that make Stripe redeliver on failure
"""

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
from django.urls import reverse

from bookings.states import BookingStatus
from payments.exceptions import InvalidSignatureError
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tests.factories import PaymentIntentFactory, WebhookEventFactory, event_payload
from payments.webhooks.events import PaymentIntentSucceeded
from payments.webhooks.handlers import WEBHOOK_HANDLERS


def post_webhook(client, payload, signature="t=1614556800,v1=abc"):
    headers = {"HTTP_STRIPE_SIGNATURE": signature} if signature else {}
    return client.post(
        reverse("stripe_webhook"),
        data=json.dumps(payload),
        content_type="application/json",
        **headers,
    )


def sign(payload: bytes, secret: str) -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def succeeded_payload(db):
    intent = PaymentIntentFactory()
    payload = event_payload(
        "payment_intent.succeeded",
        {
            "id": intent.stripe_payment_intent_id,
            "status": "succeeded",
            "amount": intent.amount * 100,
            "currency": "inr",
        },
        event_id="evt_paid",
    )
    return intent, payload


@pytest.mark.django_db
class TestStripeWebhookView:
    def test_missing_signature_is_rejected(self, client, mock_stripe):
        response = post_webhook(client, {"id": "evt_1"}, signature=None)

        assert response.status_code == 400
        mock_stripe.verify_webhook_signature.assert_not_called()

    def test_invalid_signature_writes_nothing(self, client, mock_stripe):
        mock_stripe.verify_webhook_signature.side_effect = InvalidSignatureError(
            "Invalid webhook signature", details={"error": "No signatures found"}
        )

        response = post_webhook(client, {"id": "evt_1", "type": "payout.paid"})

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    def test_missing_secret_is_server_error(self, client, mock_stripe, settings):
        settings.STRIPE_WEBHOOK_SECRET = ""

        response = post_webhook(client, {"id": "evt_1"})

        assert response.status_code == 500
        mock_stripe.verify_webhook_signature.assert_not_called()

    def test_event_without_type_is_rejected(self, client, mock_stripe):
        mock_stripe.verify_webhook_signature.return_value = {"id": "evt_1"}

        response = post_webhook(client, {"id": "evt_1"})

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    def test_event_is_recorded_and_applied(self, client, mock_stripe, succeeded_payload):
        intent, payload = succeeded_payload
        mock_stripe.verify_webhook_signature.return_value = payload

        response = post_webhook(client, payload)

        assert response.status_code == 200
        webhook = WebhookEvent.objects.get(stripe_event_id="evt_paid")
        assert webhook.status == WebhookEventStatus.PROCESSED
        assert webhook.event_type == "payment_intent.succeeded"
        intent.booking.refresh_from_db()
        assert intent.booking.status == BookingStatus.APPROVED

    def test_processed_event_is_not_dispatched_again(self, client, mock_stripe):
        WebhookEventFactory(stripe_event_id="evt_done", status=WebhookEventStatus.PROCESSED)
        mock_stripe.verify_webhook_signature.return_value = event_payload(
            "payment_intent.succeeded", {"id": "pi_x"}, event_id="evt_done"
        )

        with patch("payments.webhooks.views.process_webhook_event") as process:
            response = post_webhook(client, {"id": "evt_done"})

        assert response.status_code == 200
        assert response.content == b"Already processed"
        process.assert_not_called()

    def test_failed_event_is_retried_on_redelivery(self, client, mock_stripe, succeeded_payload):
        intent, payload = succeeded_payload
        WebhookEventFactory(
            stripe_event_id="evt_paid",
            payload=payload,
            status=WebhookEventStatus.FAILED,
            retry_count=1,
        )
        mock_stripe.verify_webhook_signature.return_value = payload

        response = post_webhook(client, payload)

        assert response.status_code == 200
        webhook = WebhookEvent.objects.get(stripe_event_id="evt_paid")
        assert webhook.status == WebhookEventStatus.PROCESSED
        assert webhook.retry_count == 2

    def test_handler_failure_answers_500(self, client, mock_stripe, succeeded_payload):
        intent, payload = succeeded_payload
        mock_stripe.verify_webhook_signature.return_value = payload

        def explode(event):
            raise RuntimeError("boom")

        with patch.dict(WEBHOOK_HANDLERS, {PaymentIntentSucceeded: explode}):
            response = post_webhook(client, payload)

        assert response.status_code == 500
        webhook = WebhookEvent.objects.get(stripe_event_id="evt_paid")
        assert webhook.status == WebhookEventStatus.FAILED
        intent.booking.refresh_from_db()
        assert intent.booking.status == BookingStatus.PENDING_PAYMENT

    def test_unhandled_event_type_is_acknowledged(self, client, mock_stripe):
        payload = event_payload("customer.created", {"id": "cus_1"}, event_id="evt_cus")
        mock_stripe.verify_webhook_signature.return_value = payload

        response = post_webhook(client, payload)

        assert response.status_code == 200
        assert WebhookEvent.objects.get(stripe_event_id="evt_cus").is_processed

    def test_get_is_not_allowed(self, client):
        response = client.get(reverse("stripe_webhook"))

        assert response.status_code == 405


@pytest.mark.django_db
class TestStripeWebhookSignature:
    """End to end through the real signature check."""

    def test_correctly_signed_event_is_processed(self, client, settings):
        settings.STRIPE_WEBHOOK_SECRET = "whsec_test_signing"
        body = json.dumps(
            event_payload("customer.created", {"id": "cus_1"}, event_id="evt_signed")
        ).encode()

        response = client.post(
            reverse("stripe_webhook"),
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=sign(body, "whsec_test_signing"),
        )

        assert response.status_code == 200
        assert WebhookEvent.objects.filter(stripe_event_id="evt_signed").exists()

    def test_tampered_body_is_rejected(self, client, settings):
        settings.STRIPE_WEBHOOK_SECRET = "whsec_test_signing"
        body = json.dumps(event_payload("customer.created", {"id": "cus_1"})).encode()
        signature = sign(body, "whsec_test_signing")

        response = client.post(
            reverse("stripe_webhook"),
            data=body.replace(b"cus_1", b"cus_2"),
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signature,
        )

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()
