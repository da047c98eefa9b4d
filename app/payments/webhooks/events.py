"""
Typed Stripe webhook events.

A verified webhook payload is parsed into exactly one of a closed set of
event variants. Each variant carries the adapter's snapshot of the object
in the event (Stripe sends the full current object, not a delta), so
handlers never touch raw dictionaries.

Usage:
    from payments.webhooks.events import parse_event

    event = parse_event(payload)
    if isinstance(event, PaymentIntentSucceeded):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Union

from payments.adapters import (
    AccountSnapshot,
    PaymentIntentResult,
    PayoutResult,
    TransferSnapshot,
)
from payments.state_machines import PayoutStatus


@dataclass(frozen=True)
class ProcessorEvent:
    """
    Fields common to every event.

    account is the connected account the event happened on (Connect events
    only), e.g. the account a payout.created was paid out from.
    """

    event_id: str
    event_type: str
    account: str | None


@dataclass(frozen=True)
class AccountUpdated(ProcessorEvent):
    snapshot: AccountSnapshot


@dataclass(frozen=True)
class PaymentIntentSucceeded(ProcessorEvent):
    intent: PaymentIntentResult


@dataclass(frozen=True)
class PaymentIntentFailed(ProcessorEvent):
    intent: PaymentIntentResult


@dataclass(frozen=True)
class TransferCreated(ProcessorEvent):
    transfer: TransferSnapshot


@dataclass(frozen=True)
class TransferUpdated(ProcessorEvent):
    transfer: TransferSnapshot


@dataclass(frozen=True)
class PayoutCreated(ProcessorEvent):
    payout: PayoutResult


@dataclass(frozen=True)
class PayoutUpdated(ProcessorEvent):
    """payout.updated, payout.paid, payout.failed and payout.canceled."""

    payout: PayoutResult


@dataclass(frozen=True)
class UnhandledEvent(ProcessorEvent):
    pass


WebhookEventVariant = Union[
    AccountUpdated,
    PaymentIntentSucceeded,
    PaymentIntentFailed,
    TransferCreated,
    TransferUpdated,
    PayoutCreated,
    PayoutUpdated,
    UnhandledEvent,
]

# payout.paid / payout.failed pin the status even if the object lags behind
_PAYOUT_STATUS_BY_EVENT = {
    "payout.paid": PayoutStatus.PAID,
    "payout.failed": PayoutStatus.FAILED,
    "payout.canceled": PayoutStatus.CANCELED,
}


def _payout(event_type: str, data: dict[str, Any], account: str | None) -> PayoutResult:
    result = PayoutResult.from_payload(data, account_id=account)
    forced_status = _PAYOUT_STATUS_BY_EVENT.get(event_type)
    if forced_status:
        result = replace(result, status=forced_status.value)
    return result


def parse_event(payload: dict[str, Any]) -> WebhookEventVariant:
    """
    Build the typed variant for a verified webhook payload.

    Raises:
        ValueError: payload has no id or type
    """
    event_id = payload.get("id")
    event_type = payload.get("type")
    if not event_id or not event_type:
        raise ValueError("Webhook payload is missing id or type")

    account = payload.get("account")
    data = (payload.get("data") or {}).get("object") or {}
    common = {"event_id": event_id, "event_type": event_type, "account": account}

    if event_type == "account.updated":
        return AccountUpdated(snapshot=AccountSnapshot.from_payload(data), **common)

    if event_type == "payment_intent.succeeded":
        return PaymentIntentSucceeded(intent=PaymentIntentResult.from_payload(data), **common)

    if event_type in ("payment_intent.payment_failed", "payment_intent.canceled"):
        return PaymentIntentFailed(intent=PaymentIntentResult.from_payload(data), **common)

    if event_type == "transfer.created":
        return TransferCreated(transfer=TransferSnapshot.from_payload(data), **common)

    if event_type in ("transfer.updated", "transfer.reversed"):
        return TransferUpdated(transfer=TransferSnapshot.from_payload(data), **common)

    if event_type == "payout.created":
        return PayoutCreated(payout=_payout(event_type, data, account), **common)

    if event_type in ("payout.updated", "payout.paid", "payout.failed", "payout.canceled"):
        return PayoutUpdated(payout=_payout(event_type, data, account), **common)

    return UnhandledEvent(**common)
