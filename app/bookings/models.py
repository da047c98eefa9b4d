"""
BookingRequest model with its django-fsm lifecycle.

A BookingRequest is a seeker's intent to occupy a listing for a number of
months. It is the only row written concurrently by users (cancel, respond)
and by processor events (payment outcomes), so every write goes through a
django-fsm transition and a compare-and-swap save.

Usage:
    from bookings.models import BookingRequest
    from bookings.states import BookingStatus

    booking = BookingRequest.objects.create(
        seeker=seeker,
        provider=listing.provider,
        listing=listing,
        requested_date=date(2026, 1, 1),
    )

    booking.begin_checkout()  # pending -> pending_payment
    booking.save()            # raises ConcurrentTransition if the row moved

Concurrency:
    ConcurrentTransitionMixin adds ``WHERE status = <status at load time>`` to
    the UPDATE. A writer that lost a race gets ConcurrentTransition instead of
    silently overwriting a state another writer already moved.

Uniqueness:
    At most one booking per (seeker, listing) may be in an active status.
    This is a partial unique index, so concurrent creations fail in the
    database with IntegrityError rather than racing in application code.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from django_fsm import ConcurrentTransitionMixin, FSMField, transition

from bookings.states import (
    PAYMENT_FAILED_MESSAGE,
    PAYMENT_SUCCEEDED_MESSAGE,
    BookingStatus,
)
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class BookingRequestQuerySet(models.QuerySet):
    """Chainable filters for booking requests."""

    def active(self):
        """Bookings that still hold the seeker's slot on the listing."""
        return self.filter(status__in=BookingStatus.active_states())

    def for_provider(self, provider):
        return self.filter(provider=provider)

    def for_participant(self, user):
        """Bookings where the user is either the seeker or the provider."""
        return self.filter(Q(seeker=user) | Q(provider=user))


class BookingRequest(ConcurrentTransitionMixin, UUIDPrimaryKeyMixin, BaseModel):
    """
    A seeker's request to book a listing.

    Fields:
        seeker: User who requested the booking
        provider: Listing owner (copied from the listing at creation)
        listing: Listing being booked
        status: Current FSM state
        requested_date: Requested check-in date
        duration_months: Requested stay length in months
        message: Seeker's note to the provider
        response_message: Provider's (or payment outcome's) reply
        responded_at: When the booking left pending/pending_payment
        cancelled_at: When the booking was cancelled
        cancellation_reason: Free-text cancellation reason
    """

    seeker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="booking_requests",
        help_text="Seeker who made the request",
    )
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_booking_requests",
        help_text="Provider who owns the listing",
    )
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.PROTECT,
        related_name="booking_requests",
        help_text="Listing being booked",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=BookingStatus.PENDING,
        choices=BookingStatus.choices,
        db_index=True,
        help_text="Current state of the booking (managed by FSM)",
    )

    # ==========================================================================
    # Request Details
    # ==========================================================================

    requested_date = models.DateField(
        help_text="Requested check-in date",
    )
    duration_months = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Requested stay length in months",
    )
    message = models.TextField(
        blank=True,
        default="",
        help_text="Seeker's note to the provider",
    )
    response_message = models.TextField(
        blank=True,
        default="",
        help_text="Reply recorded when the booking was approved or rejected",
    )

    # ==========================================================================
    # Timestamps
    # ==========================================================================

    responded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the booking was approved or rejected",
    )
    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the booking was cancelled",
    )
    cancellation_reason = models.TextField(
        blank=True,
        default="",
        help_text="Why the booking was cancelled",
    )

    objects = BookingRequestQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Booking Request"
        verbose_name_plural = "Booking Requests"
        indexes = [
            models.Index(fields=["seeker", "status"], name="bookings_bo_seeker__8f1c2a_idx"),
            models.Index(fields=["provider", "status"], name="bookings_bo_provide_4b7e90_idx"),
            models.Index(fields=["listing", "status"], name="bookings_bo_listing_d3a5f1_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["seeker", "listing"],
                condition=Q(status__in=BookingStatus.active_states()),
                name="unique_active_booking_per_seeker_listing",
            ),
        ]

    def __str__(self) -> str:
        return f"BookingRequest({self.id}, {self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in BookingStatus.terminal_states()

    # ==========================================================================
    # Checkout
    # ==========================================================================

    @transition(
        field=status,
        source=[BookingStatus.PENDING, BookingStatus.PENDING_PAYMENT],
        target=BookingStatus.PENDING_PAYMENT,
    )
    def begin_checkout(self) -> None:
        """Seeker started (or resumed) paying for the booking."""

    # ==========================================================================
    # Payment Outcomes
    # ==========================================================================

    @transition(
        field=status,
        source=BookingStatus.payable_states(),
        target=BookingStatus.APPROVED,
    )
    def confirm_payment(self) -> None:
        """Processor reported the booking payment succeeded."""
        self.response_message = PAYMENT_SUCCEEDED_MESSAGE
        self.responded_at = timezone.now()

    @transition(
        field=status,
        source=BookingStatus.payable_states(),
        target=BookingStatus.REJECTED,
    )
    def fail_payment(self) -> None:
        """Processor reported the booking payment failed."""
        self.response_message = PAYMENT_FAILED_MESSAGE
        self.responded_at = timezone.now()

    # ==========================================================================
    # Provider Response
    # ==========================================================================

    @transition(
        field=status,
        source=BookingStatus.PENDING,
        target=BookingStatus.APPROVED,
    )
    def approve(self, response_message: str = "") -> None:
        self.response_message = response_message
        self.responded_at = timezone.now()

    @transition(
        field=status,
        source=BookingStatus.PENDING,
        target=BookingStatus.REJECTED,
    )
    def reject(self, response_message: str = "") -> None:
        self.response_message = response_message
        self.responded_at = timezone.now()

    # ==========================================================================
    # Cancellation & Completion
    # ==========================================================================

    @transition(
        field=status,
        source=[BookingStatus.PENDING, BookingStatus.APPROVED],
        target=BookingStatus.CANCELLED,
    )
    def cancel(self, reason: str = "") -> None:
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()

    @transition(
        field=status,
        source=BookingStatus.APPROVED,
        target=BookingStatus.COMPLETED,
    )
    def complete(self) -> None:
        """Stay concluded."""
