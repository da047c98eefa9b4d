"""
Payment domain models.

Local mirrors of Stripe objects, kept eventually consistent by webhook
events and explicit refresh reads:
- ConnectedAccount: A provider's Stripe Connect account
- PaymentIntent: One attempted charge for a booking
- Transfer: Money routed to a provider's connected account
- Payout: Money paid out from a connected account to the provider's bank
- WebhookEvent: Stripe webhook event tracking for idempotent processing
"""

from payments.models.connected_account import ConnectedAccount, derive_account_status
from payments.models.payment_intent import PaymentIntent
from payments.models.payout import Payout
from payments.models.transfer import Transfer
from payments.models.webhook_event import WebhookEvent

__all__ = [
    "ConnectedAccount",
    "PaymentIntent",
    "Payout",
    "Transfer",
    "WebhookEvent",
    "derive_account_status",
]
