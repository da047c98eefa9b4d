"""
Status enums for the payment mirror models.

These are Django TextChoices for database storage and admin integration.
The mirror models copy the processor's status verbatim (last write wins);
the enums only name the values the processor is known to send.

PaymentIntent (processor lifecycle):
    requires_payment_method → requires_confirmation → requires_action
    → processing → succeeded | canceled

Transfer:
    pending → in_transit → paid
    pending/in_transit → failed | canceled | reversed

Payout:
    pending → in_transit → paid
    pending/in_transit → failed | canceled
"""

from django.db import models


class ConnectedAccountStatus(models.TextChoices):
    """
    Derived status of a provider's connected account.

    ENABLED: processor has enabled charges
    RESTRICTED: processor disabled the account or requirements are past due
    PENDING: onboarding still in progress
    """

    PENDING = "pending", "Pending"
    RESTRICTED = "restricted", "Restricted"
    ENABLED = "enabled", "Enabled"


class PaymentIntentStatus(models.TextChoices):
    """Processor-side status of a payment intent."""

    REQUIRES_PAYMENT_METHOD = "requires_payment_method", "Requires Payment Method"
    REQUIRES_CONFIRMATION = "requires_confirmation", "Requires Confirmation"
    REQUIRES_ACTION = "requires_action", "Requires Action"
    PROCESSING = "processing", "Processing"
    REQUIRES_CAPTURE = "requires_capture", "Requires Capture"
    SUCCEEDED = "succeeded", "Succeeded"
    CANCELED = "canceled", "Canceled"

    @classmethod
    def in_flight(cls) -> list[str]:
        """Statuses that still count as pending money for a provider."""
        return [
            cls.REQUIRES_PAYMENT_METHOD,
            cls.REQUIRES_CONFIRMATION,
            cls.REQUIRES_ACTION,
            cls.PROCESSING,
        ]


class PaymentPurpose(models.TextChoices):
    """What a payment intent was created for."""

    BOOKING_FEE = "booking_fee", "Booking Fee"


class TransferStatus(models.TextChoices):
    """Status of a transfer to a provider's connected account."""

    PENDING = "pending", "Pending"
    IN_TRANSIT = "in_transit", "In Transit"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    CANCELED = "canceled", "Canceled"
    REVERSED = "reversed", "Reversed"


class PayoutStatus(models.TextChoices):
    """Processor-side status of a payout to the provider's bank."""

    PENDING = "pending", "Pending"
    IN_TRANSIT = "in_transit", "In Transit"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    CANCELED = "canceled", "Canceled"


class PayoutMethod(models.TextChoices):
    """Payout speed requested from the processor."""

    STANDARD = "standard", "Standard"
    INSTANT = "instant", "Instant"


class PayoutOrigin(models.TextChoices):
    """
    Which side first recorded the payout row.

    REQUESTED: created by a provider's payout request
    PROCESSOR: created from a payout.created event (automatic payouts)
    """

    REQUESTED = "requested", "Requested"
    PROCESSOR = "processor", "Processor"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    State Flow:
        PENDING → PROCESSING → PROCESSED
        PENDING → PROCESSING → FAILED (processor redelivers, retry task)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


__all__ = [
    "ConnectedAccountStatus",
    "PaymentIntentStatus",
    "PaymentPurpose",
    "TransferStatus",
    "PayoutStatus",
    "PayoutMethod",
    "PayoutOrigin",
    "WebhookEventStatus",
]
