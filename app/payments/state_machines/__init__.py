"""
Status enums for payment mirror models.
"""

from payments.state_machines.states import (
    ConnectedAccountStatus,
    PaymentIntentStatus,
    PaymentPurpose,
    PayoutMethod,
    PayoutOrigin,
    PayoutStatus,
    TransferStatus,
    WebhookEventStatus,
)

__all__ = [
    "ConnectedAccountStatus",
    "PaymentIntentStatus",
    "PaymentPurpose",
    "PayoutMethod",
    "PayoutOrigin",
    "PayoutStatus",
    "TransferStatus",
    "WebhookEventStatus",
]
