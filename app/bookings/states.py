"""
Booking lifecycle states.

State Diagram:
    PENDING ──────────────┬──> PENDING_PAYMENT ──┬──> APPROVED ──┬──> COMPLETED
       │                  │                      │               │
       ├──> APPROVED      │                      └──> REJECTED   └──> CANCELLED
       ├──> REJECTED      │
       └──> CANCELLED     │
                          └─ (resume checkout keeps PENDING_PAYMENT)

Terminal states (no outgoing transitions):
    REJECTED, CANCELLED, COMPLETED

Usage:
    from bookings.states import BookingStatus

    if booking.status in BookingStatus.terminal_states():
        return
"""

from __future__ import annotations

from django.db import models


class BookingStatus(models.TextChoices):
    """
    Lifecycle of a seeker's booking request.

    Flow:
        PENDING -> PENDING_PAYMENT: Seeker starts checkout
        PENDING_PAYMENT -> APPROVED: Processor reports payment succeeded
        PENDING_PAYMENT -> REJECTED: Processor reports payment failed
        PENDING/APPROVED -> CANCELLED: Seeker or provider cancels
        APPROVED -> COMPLETED: Stay concluded
    """

    PENDING = "pending", "Pending"
    PENDING_PAYMENT = "pending_payment", "Pending Payment"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    CANCELLED = "cancelled", "Cancelled"
    COMPLETED = "completed", "Completed"

    @classmethod
    def active_states(cls) -> list[str]:
        """States covered by the one-active-booking-per-listing constraint."""
        return [cls.PENDING, cls.PENDING_PAYMENT, cls.APPROVED]

    @classmethod
    def terminal_states(cls) -> list[str]:
        """States that can never be left."""
        return [cls.REJECTED, cls.CANCELLED, cls.COMPLETED]

    @classmethod
    def payable_states(cls) -> list[str]:
        """States a payment outcome may move a booking out of."""
        return [cls.PENDING, cls.PENDING_PAYMENT]


# Canned response messages written by payment outcomes
PAYMENT_SUCCEEDED_MESSAGE = "Payment received - booking confirmed"
PAYMENT_FAILED_MESSAGE = "Payment failed - booking rejected"


__all__ = [
    "BookingStatus",
    "PAYMENT_SUCCEEDED_MESSAGE",
    "PAYMENT_FAILED_MESSAGE",
]
