"""
Celery tasks for payment reconciliation.

Webhooks are the primary way the mirror tables learn about Stripe state.
These periodic tasks are the safety net for events that never arrived or
failed to apply:
- Polling Stripe for payment intents still in flight
- Refreshing connected accounts that are not yet enabled
- Re-dispatching recorded webhook events that failed

Every task reuses the same write path as the webhook handlers, so a late
webhook and a reconciliation run converge on the same state.

Usage:
    # Typically called via celery-beat schedule (see config.settings)
    from payments.tasks import reconcile_pending_payment_intents

    reconcile_pending_payment_intents.delay()
"""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from payments.adapters import StripeAdapter
from payments.exceptions import ProcessorError
from payments.models import ConnectedAccount, PaymentIntent, WebhookEvent
from payments.services import (
    ConnectedAccountService,
    PaymentOrchestrator,
    payment_outcome_for_status,
)
from payments.state_machines import ConnectedAccountStatus
from payments.webhooks.handlers import process_webhook_event

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Rows handled per run; the next run picks up the rest
BATCH_SIZE = 100


# =============================================================================
# Payment Intent Reconciliation
# =============================================================================


@shared_task
def reconcile_pending_payment_intents() -> dict:
    """
    Poll Stripe for payment intents that have been in flight too long.

    An intent counts as stale once it has not been updated for
    PAYMENT_RECONCILE_AFTER_MINUTES. Each one is re-read from Stripe and
    applied exactly like the matching webhook would be.

    This task should be scheduled via celery-beat, e.g., every 15 minutes.

    Returns:
        Dict with counts of checked, transitioned and failed intents
    """
    threshold = timezone.now() - timedelta(minutes=settings.PAYMENT_RECONCILE_AFTER_MINUTES)
    stale_intents = PaymentIntent.objects.in_flight().filter(
        updated_at__lt=threshold,
    ).order_by("updated_at")[:BATCH_SIZE]

    checked_count = 0
    transitioned_count = 0
    failed_count = 0

    for payment_intent in stale_intents:
        extra = {
            "payment_intent_id": payment_intent.stripe_payment_intent_id,
            "booking_id": str(payment_intent.booking_id),
        }
        try:
            result = StripeAdapter.retrieve_payment_intent(
                payment_intent.stripe_payment_intent_id,
                trace_id=str(payment_intent.booking_id),
            )
        except ProcessorError as e:
            failed_count += 1
            logger.warning(
                f"Could not reconcile payment intent: {e.message}",
                extra={**extra, "error_code": e.error_code},
            )
            continue

        checked_count += 1
        if PaymentOrchestrator.record_intent_state(
            payment_intent, result, payment_outcome_for_status(result.status)
        ):
            transitioned_count += 1
            logger.info(
                "Reconciled payment intent moved booking",
                extra={**extra, "status": result.status},
            )

    logger.info(
        f"Reconciled {checked_count} payment intents",
        extra={
            "checked_count": checked_count,
            "transitioned_count": transitioned_count,
            "failed_count": failed_count,
        },
    )

    return {
        "checked_count": checked_count,
        "transitioned_count": transitioned_count,
        "failed_count": failed_count,
    }


# =============================================================================
# Connected Account Refresh
# =============================================================================


@shared_task
def refresh_connected_accounts() -> dict:
    """
    Re-read connected accounts that are still onboarding or restricted.

    Enabled accounts are left to account.updated events.

    Returns:
        Dict with counts of refreshed and failed accounts
    """
    accounts = ConnectedAccount.objects.exclude(
        status=ConnectedAccountStatus.ENABLED,
    ).order_by("updated_at")[:BATCH_SIZE]

    refreshed_count = 0
    failed_count = 0

    for account in accounts:
        try:
            ConnectedAccountService.sync_account(account)
            refreshed_count += 1
        except ProcessorError as e:
            failed_count += 1
            logger.warning(
                f"Could not refresh connected account: {e.message}",
                extra={
                    "stripe_account_id": account.stripe_account_id,
                    "error_code": e.error_code,
                },
            )

    if refreshed_count or failed_count:
        logger.info(
            f"Refreshed {refreshed_count} connected accounts",
            extra={"refreshed_count": refreshed_count, "failed_count": failed_count},
        )

    return {"refreshed_count": refreshed_count, "failed_count": failed_count}


# =============================================================================
# Webhook Retry
# =============================================================================


@shared_task
def retry_failed_webhooks() -> dict:
    """
    Re-dispatch failed webhook events.

    Finds failed events that haven't exceeded WEBHOOK_MAX_RETRIES and runs
    them through the handlers again. Each attempt increments retry_count.

    This task should be scheduled via celery-beat, e.g., every 5 minutes.

    Returns:
        Dict with counts of processed and still failing events
    """
    failed_webhooks = WebhookEvent.objects.retryable().order_by("created_at")[:BATCH_SIZE]

    processed_count = 0
    failed_count = 0

    for webhook in failed_webhooks:
        try:
            process_webhook_event(webhook)
            processed_count += 1
        except Exception:
            # process_webhook_event already marked it FAILED and logged the traceback
            failed_count += 1
            logger.warning(
                "Webhook retry failed",
                extra={
                    "stripe_event_id": webhook.stripe_event_id,
                    "retry_count": webhook.retry_count,
                },
            )

    logger.info(
        f"Retried {processed_count + failed_count} failed webhooks",
        extra={"processed_count": processed_count, "failed_count": failed_count},
    )

    return {"processed_count": processed_count, "failed_count": failed_count}
