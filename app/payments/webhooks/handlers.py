"""
Webhook event handlers for Stripe events.

This module provides a handler registry keyed by typed event variant, the
handlers themselves, and process_webhook_event which runs one recorded
WebhookEvent through them.

Every handler is idempotent by construction:
- It looks up the mirror row by the Stripe id in the event
- "created" events insert when the row is missing
- "updated" events on a missing row log and do nothing; the next
  refresh or reconciliation run fills the gap
- A present row gets a status overwrite from the event (last write wins)

No handler deletes a row or decrements anything.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler(CustomEvent)
    def handle_custom_event(event: CustomEvent) -> ServiceResult:
        ...

    result = dispatch_webhook(webhook_event)
"""

from __future__ import annotations

import logging
from typing import Callable

from django.db import transaction
from django.db.models import Q

from core.services import ServiceResult
from payments.models import ConnectedAccount, PaymentIntent, Payout, Transfer, WebhookEvent
from payments.services import PaymentOrchestrator
from payments.state_machines import PayoutOrigin
from payments.webhooks.events import (
    AccountUpdated,
    PaymentIntentFailed,
    PaymentIntentSucceeded,
    PayoutCreated,
    PayoutUpdated,
    TransferCreated,
    TransferUpdated,
    WebhookEventVariant,
    parse_event,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event variant classes to handler functions
WEBHOOK_HANDLERS: dict[type, Callable[[WebhookEventVariant], ServiceResult]] = {}


def register_handler(event_class: type) -> Callable:
    """
    Decorator to register the handler for one event variant.

    Usage:
        @register_handler(PaymentIntentSucceeded)
        def handle_payment_succeeded(event: PaymentIntentSucceeded) -> ServiceResult:
            ...
    """

    def decorator(func: Callable[[WebhookEventVariant], ServiceResult]) -> Callable:
        WEBHOOK_HANDLERS[event_class] = func
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Parse a recorded event and dispatch it to its handler.

    Events without a handler are acknowledged as no-ops.

    Raises:
        ValueError: The stored payload has no id or type
    """
    event = parse_event(webhook_event.payload)
    handler = WEBHOOK_HANDLERS.get(type(event))

    if handler is None:
        logger.info(
            f"No handler registered for event type: {event.event_type}",
            extra={"stripe_event_id": event.event_id},
        )
        return ServiceResult.success(None)

    logger.info(
        f"Dispatching {event.event_type} to handler",
        extra={"stripe_event_id": event.event_id},
    )
    return handler(event)


def process_webhook_event(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Run a recorded event through its handler and record the outcome.

    The handler's writes commit together or not at all. On failure the
    event is marked FAILED and the exception propagates, so the webhook
    view answers 500 and Stripe redelivers.
    """
    webhook_event.mark_processing()
    webhook_event.save(update_fields=["status", "retry_count", "updated_at"])

    try:
        with transaction.atomic():
            result = dispatch_webhook(webhook_event)
    except Exception as exc:
        webhook_event.mark_failed(f"{type(exc).__name__}: {exc}")
        webhook_event.save(update_fields=["status", "error_message", "updated_at"])
        logger.error(
            "Webhook processing failed",
            extra={
                "stripe_event_id": webhook_event.stripe_event_id,
                "event_type": webhook_event.event_type,
                "object_id": webhook_event.get_object_id(),
                "retry_count": webhook_event.retry_count,
            },
            exc_info=True,
        )
        raise

    webhook_event.mark_processed()
    webhook_event.save(update_fields=["status", "processed_at", "error_message", "updated_at"])
    return result


# =============================================================================
# Connected Account Handlers
# =============================================================================


@register_handler(AccountUpdated)
def handle_account_updated(event: AccountUpdated) -> ServiceResult:
    """Overwrite the connected account mirror with Stripe's current state."""
    snapshot = event.snapshot
    account = ConnectedAccount.objects.filter(stripe_account_id=snapshot.id).first()

    if account is None:
        logger.info(
            "account.updated for unknown account, ignoring",
            extra={"stripe_event_id": event.event_id, "stripe_account_id": snapshot.id},
        )
        return ServiceResult.success(None)

    account.apply_snapshot(snapshot)
    account.save()

    logger.info(
        "Connected account updated",
        extra={
            "stripe_event_id": event.event_id,
            "stripe_account_id": snapshot.id,
            "status": account.status,
        },
    )
    return ServiceResult.success(account)


# =============================================================================
# Payment Intent Handlers
# =============================================================================


def _apply_intent_outcome(
    event: PaymentIntentSucceeded | PaymentIntentFailed, succeeded: bool
) -> ServiceResult:
    extra = {"stripe_event_id": event.event_id, "payment_intent_id": event.intent.id}

    payment_intent = PaymentIntent.objects.filter(
        stripe_payment_intent_id=event.intent.id
    ).first()

    if payment_intent is None:
        # Not created locally (yet); refresh or redelivery resolves it
        logger.info(f"{event.event_type} for unknown payment intent, ignoring", extra=extra)
        return ServiceResult.success(None)

    transitioned = PaymentOrchestrator.record_intent_state(
        payment_intent, event.intent, succeeded
    )

    logger.info(
        f"Processed {event.event_type}",
        extra={
            **extra,
            "booking_id": str(payment_intent.booking_id),
            "status": payment_intent.status,
            "booking_transitioned": transitioned,
        },
    )
    return ServiceResult.success(payment_intent)


@register_handler(PaymentIntentSucceeded)
def handle_payment_intent_succeeded(event: PaymentIntentSucceeded) -> ServiceResult:
    """Mirror the succeeded status and approve the booking if awaiting payment."""
    return _apply_intent_outcome(event, succeeded=True)


@register_handler(PaymentIntentFailed)
def handle_payment_intent_failed(event: PaymentIntentFailed) -> ServiceResult:
    """Mirror Stripe's status and reject the booking if awaiting payment."""
    return _apply_intent_outcome(event, succeeded=False)


# =============================================================================
# Transfer Handlers
# =============================================================================


def _intent_for_source(source_transaction: str | None) -> PaymentIntent | None:
    """A transfer's source is the intent's charge (or the intent itself)."""
    if not source_transaction:
        return None
    return PaymentIntent.objects.filter(
        Q(latest_charge_id=source_transaction)
        | Q(stripe_payment_intent_id=source_transaction)
    ).first()


def _link_late_intent(transfer: Transfer, source_transaction: str | None) -> None:
    """Attach the intent to a transfer recorded before the intent's charge was known."""
    if transfer.payment_intent_id is not None:
        return
    payment_intent = _intent_for_source(source_transaction or transfer.source_transaction)
    if payment_intent is None:
        return
    transfer.payment_intent = payment_intent
    if transfer.provider_id is None:
        transfer.provider_id = payment_intent.provider_id


@register_handler(TransferCreated)
def handle_transfer_created(event: TransferCreated) -> ServiceResult:
    """Insert the transfer mirror row, or refresh it if already recorded."""
    snapshot = event.transfer
    extra = {"stripe_event_id": event.event_id, "transfer_id": snapshot.id}

    payment_intent = _intent_for_source(snapshot.source_transaction)
    if payment_intent is not None:
        provider_id = payment_intent.provider_id
    else:
        provider_id = (
            ConnectedAccount.objects.filter(stripe_account_id=snapshot.destination)
            .values_list("provider_id", flat=True)
            .first()
        )

    transfer, created = Transfer.objects.get_or_create(
        stripe_transfer_id=snapshot.id,
        defaults={
            "payment_intent": payment_intent,
            "provider_id": provider_id,
            "amount": snapshot.amount,
            "currency": snapshot.currency,
            "status": snapshot.status,
            "destination": snapshot.destination,
            "source_transaction": snapshot.source_transaction or "",
            "description": snapshot.description or "Transfer to provider",
        },
    )
    if not created:
        transfer.apply_snapshot(snapshot)
        _link_late_intent(transfer, snapshot.source_transaction)
        transfer.save()

    logger.info(
        "Transfer recorded" if created else "Transfer already recorded, status refreshed",
        extra={
            **extra,
            "payment_intent_id": payment_intent.stripe_payment_intent_id if payment_intent else None,
        },
    )
    return ServiceResult.success(transfer)


@register_handler(TransferUpdated)
def handle_transfer_updated(event: TransferUpdated) -> ServiceResult:
    """Overwrite the transfer's status (last write wins)."""
    snapshot = event.transfer
    transfer = Transfer.objects.filter(stripe_transfer_id=snapshot.id).first()

    if transfer is None:
        logger.info(
            "Transfer update for unknown transfer, ignoring",
            extra={"stripe_event_id": event.event_id, "transfer_id": snapshot.id},
        )
        return ServiceResult.success(None)

    transfer.apply_snapshot(snapshot)
    _link_late_intent(transfer, snapshot.source_transaction)
    transfer.save()
    return ServiceResult.success(transfer)


# =============================================================================
# Payout Handlers
# =============================================================================


@register_handler(PayoutCreated)
def handle_payout_created(event: PayoutCreated) -> ServiceResult:
    """
    Record a payout Stripe created.

    A payout the provider requested is already recorded under the same id;
    then only its status is refreshed. Unknown ids (automatic payouts, or a
    request whose response was lost) are inserted with origin PROCESSOR.
    """
    result = event.payout
    extra = {"stripe_event_id": event.event_id, "payout_id": result.id}

    payout = Payout.objects.filter(stripe_payout_id=result.id).first()
    if payout is not None:
        payout.apply_result(result)
        payout.save()
        logger.info("Payout already recorded, status refreshed", extra=extra)
        return ServiceResult.success(payout)

    account = ConnectedAccount.objects.filter(stripe_account_id=event.account).first()
    if account is None:
        logger.info(
            "payout.created for unknown connected account, ignoring",
            extra={**extra, "stripe_account_id": event.account},
        )
        return ServiceResult.success(None)

    payout, created = Payout.objects.get_or_create(
        stripe_payout_id=result.id,
        defaults={
            "provider_id": account.provider_id,
            "stripe_account_id": account.stripe_account_id,
            "amount": result.amount,
            "currency": result.currency,
            "method": result.method,
            "status": result.status,
            "origin": PayoutOrigin.PROCESSOR,
            "description": result.description or "Payout to bank account",
            "arrival_date": result.arrival_date,
            "failure_code": result.failure_code or "",
            "failure_message": result.failure_message or "",
            "metadata": result.metadata,
        },
    )
    if not created:
        payout.apply_result(result)
        payout.save()

    logger.info(
        "Payout recorded from Stripe",
        extra={**extra, "provider_id": account.provider_id},
    )
    return ServiceResult.success(payout)


@register_handler(PayoutUpdated)
def handle_payout_updated(event: PayoutUpdated) -> ServiceResult:
    """payout.updated/paid/failed/canceled: overwrite status and details."""
    result = event.payout
    payout = Payout.objects.filter(stripe_payout_id=result.id).first()

    if payout is None:
        logger.info(
            f"{event.event_type} for unknown payout, ignoring",
            extra={"stripe_event_id": event.event_id, "payout_id": result.id},
        )
        return ServiceResult.success(None)

    payout.apply_result(result)
    payout.save()

    logger.info(
        f"Processed {event.event_type}",
        extra={
            "stripe_event_id": event.event_id,
            "payout_id": result.id,
            "status": payout.status,
        },
    )
    return ServiceResult.success(payout)


__all__ = [
    "WEBHOOK_HANDLERS",
    "dispatch_webhook",
    "process_webhook_event",
    "register_handler",
]
