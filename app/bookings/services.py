"""
Booking service: every write to a BookingRequest goes through here.

Writers:
    - Seekers create requests, start checkout and cancel
    - Providers approve, reject and cancel
    - The webhook handlers and reconciliation tasks apply payment outcomes

None of them hold a lock. Each write is a django-fsm transition saved with
ConcurrentTransitionMixin's compare-and-swap, and the one-active-booking rule
is a partial unique index. A writer that loses a race reloads the row and
re-evaluates the transition against the state it finds.

Usage:
    from bookings.services import BookingService

    result = BookingService.create_booking_request(
        seeker=request.user,
        listing=listing,
        requested_date=date(2026, 1, 1),
        duration_months=3,
    )
    if not result.success:
        return Response(result.to_response(), status=result.status_code)

    # From a webhook handler; idempotent, never raises for terminal bookings
    BookingService.apply_payment_outcome(booking_id, succeeded=True)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction

from django_fsm import ConcurrentTransition, can_proceed

from bookings.exceptions import (
    BookingNotFoundError,
    BookingStateError,
    DuplicateBookingError,
)
from bookings.models import BookingRequest
from bookings.states import BookingStatus
from core.exceptions import BaseApplicationError, ValidationError
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from datetime import date

    from authentication.models import User
    from listings.models import Listing


class BookingService(BaseService):
    """
    Lifecycle operations on booking requests.

    Public methods return ServiceResult for expected failures (not found,
    duplicate, illegal transition). ``start_checkout`` and
    ``apply_payment_outcome`` are called by the payments app and raise or
    return plain values instead.
    """

    # Reload-and-retry attempts when a compare-and-swap save loses a race
    MAX_TRANSITION_ATTEMPTS = 3

    RESPOND_ACTIONS = ("approve", "reject")

    @staticmethod
    def default_message(duration_months: int | None) -> str:
        if not duration_months:
            return ""
        return f"Booking request for {duration_months} month(s)"

    @classmethod
    def _insert(cls, **fields) -> BookingRequest:
        """
        Insert a booking, translating the partial unique index violation.

        The savepoint keeps an enclosing transaction usable after the
        IntegrityError. Any other integrity failure (missing column value,
        dangling foreign key) is re-raised as is.
        """
        try:
            with transaction.atomic():
                return BookingRequest.objects.create(**fields)
        except IntegrityError as exc:
            competing = BookingRequest.objects.active().filter(
                seeker=fields["seeker"], listing=fields["listing"]
            )
            if not competing.exists():
                raise
            raise DuplicateBookingError(
                details={
                    "seeker_id": str(fields["seeker"].pk),
                    "listing_id": str(fields["listing"].pk),
                },
            ) from exc

    # ==========================================================================
    # Seeker Operations
    # ==========================================================================

    @classmethod
    def create_booking_request(
        cls,
        seeker: User,
        listing: Listing,
        requested_date: date,
        message: str = "",
        duration_months: int | None = None,
    ) -> ServiceResult[BookingRequest]:
        """
        Create a pending booking request.

        Args:
            seeker: Requesting user
            listing: Listing to book
            requested_date: Requested check-in date
            message: Note to the provider (defaults to the duration summary)
            duration_months: Requested stay length

        Returns:
            ServiceResult with the new BookingRequest, or DUPLICATE_BOOKING
            when the seeker already holds an active booking on the listing.
        """
        logger = cls.get_logger()

        try:
            if not listing.is_bookable:
                raise ValidationError(
                    "Listing is not available for booking",
                    error_code="LISTING_UNAVAILABLE",
                    details={"listing_id": str(listing.id)},
                )
            if listing.provider_id == seeker.pk:
                raise ValidationError(
                    "You cannot book your own listing",
                    details={"listing_id": str(listing.id)},
                )

            booking = cls._insert(
                seeker=seeker,
                provider=listing.provider,
                listing=listing,
                status=BookingStatus.PENDING,
                requested_date=requested_date,
                duration_months=duration_months,
                message=message.strip() or cls.default_message(duration_months),
            )
        except BaseApplicationError as exc:
            logger.info(
                "Booking request refused",
                extra={
                    "seeker_id": seeker.pk,
                    "listing_id": str(listing.id),
                    "error_code": exc.error_code,
                },
            )
            return ServiceResult.from_exception(exc)

        logger.info(
            "Booking request created",
            extra={
                "booking_id": str(booking.id),
                "seeker_id": seeker.pk,
                "listing_id": str(listing.id),
            },
        )
        return ServiceResult.success(booking)

    @classmethod
    def start_checkout(
        cls,
        seeker: User,
        listing: Listing,
        requested_date: date,
        duration_months: int,
        message: str = "",
    ) -> BookingRequest:
        """
        Resolve the seeker's booking for a listing and move it to pending_payment.

        Reuses an existing pending/pending_payment booking (resume checkout)
        instead of creating a duplicate. Safe to repeat.

        Raises:
            BookingStateError: The active booking is already approved
                (error_code BOOKING_ALREADY_CONFIRMED), or the row kept
                changing under us.
        """
        logger = cls.get_logger()
        message = message.strip()

        for _attempt in range(cls.MAX_TRANSITION_ATTEMPTS):
            booking = (
                BookingRequest.objects.active()
                .filter(seeker=seeker, listing=listing)
                .first()
            )

            if booking is None:
                try:
                    booking = cls._insert(
                        seeker=seeker,
                        provider=listing.provider,
                        listing=listing,
                        status=BookingStatus.PENDING_PAYMENT,
                        requested_date=requested_date,
                        duration_months=duration_months,
                        message=message or cls.default_message(duration_months),
                    )
                except DuplicateBookingError:
                    # Lost the insert race; resume the winner's booking
                    continue
                logger.info(
                    "Booking created for checkout",
                    extra={"booking_id": str(booking.id), "listing_id": str(listing.id)},
                )
                return booking

            if booking.status == BookingStatus.APPROVED:
                raise BookingStateError(
                    "This booking is already confirmed",
                    error_code="BOOKING_ALREADY_CONFIRMED",
                    details={"booking_id": str(booking.id)},
                )

            booking.begin_checkout()
            booking.requested_date = requested_date
            booking.duration_months = duration_months
            if message:
                booking.message = message
            try:
                cls._save_attempt(booking)
            except ConcurrentTransition:
                continue

            logger.info(
                "Checkout resumed on existing booking",
                extra={"booking_id": str(booking.id), "listing_id": str(listing.id)},
            )
            return booking

        raise BookingStateError(
            "Booking was updated while starting checkout, please retry",
            error_code="BOOKING_CONCURRENT_UPDATE",
        )

    # ==========================================================================
    # Participant Operations
    # ==========================================================================

    @classmethod
    def cancel_booking(
        cls,
        booking_id,
        user: User,
        reason: str = "",
    ) -> ServiceResult[BookingRequest]:
        """
        Cancel a pending or approved booking as its seeker or provider.

        Args:
            booking_id: BookingRequest id
            user: Seeker or provider of the booking
            reason: Optional reason (defaults by who cancelled)

        Returns:
            ServiceResult with the cancelled booking
        """
        logger = cls.get_logger()

        try:
            booking = cls._get_for_participant(booking_id, user)
            if not can_proceed(booking.cancel):
                raise BookingStateError(
                    f"Cannot cancel a booking that is {booking.status}",
                    details={"booking_id": str(booking.id), "status": booking.status},
                )

            if not reason.strip():
                if booking.seeker_id == user.pk:
                    reason = "Cancelled by seeker"
                else:
                    reason = "Cancelled by provider"

            booking.cancel(reason=reason.strip())
            cls._save_transition(booking)
        except BaseApplicationError as exc:
            logger.info(
                "Booking cancellation refused",
                extra={"booking_id": str(booking_id), "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)

        logger.info(
            "Booking cancelled",
            extra={"booking_id": str(booking.id), "cancelled_by": user.pk},
        )
        return ServiceResult.success(booking)

    @classmethod
    def respond_to_booking(
        cls,
        booking_id,
        provider: User,
        action: str,
        response_message: str = "",
    ) -> ServiceResult[BookingRequest]:
        """
        Approve or reject a pending booking as its provider.

        Args:
            booking_id: BookingRequest id
            provider: Listing owner
            action: "approve" or "reject"
            response_message: Reply shown to the seeker
        """
        logger = cls.get_logger()

        try:
            if action not in cls.RESPOND_ACTIONS:
                raise ValidationError(
                    "Action must be 'approve' or 'reject'",
                    details={"action": action},
                )

            booking = BookingRequest.objects.for_provider(provider).filter(id=booking_id).first()
            if booking is None:
                raise BookingNotFoundError(
                    "Booking not found",
                    details={"booking_id": str(booking_id)},
                )

            transition_method = booking.approve if action == "approve" else booking.reject
            if not can_proceed(transition_method):
                raise BookingStateError(
                    f"Cannot {action} a booking that is {booking.status}",
                    details={"booking_id": str(booking.id), "status": booking.status},
                )

            transition_method(response_message=response_message.strip())
            cls._save_transition(booking)
        except BaseApplicationError as exc:
            logger.info(
                "Booking response refused",
                extra={"booking_id": str(booking_id), "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)

        logger.info(
            "Booking responded",
            extra={"booking_id": str(booking.id), "status": booking.status},
        )
        return ServiceResult.success(booking)

    @classmethod
    def complete_booking(cls, booking_id) -> ServiceResult[BookingRequest]:
        """Mark an approved booking's stay as concluded."""
        try:
            booking = BookingRequest.objects.filter(id=booking_id).first()
            if booking is None:
                raise BookingNotFoundError(
                    "Booking not found",
                    details={"booking_id": str(booking_id)},
                )
            if not can_proceed(booking.complete):
                raise BookingStateError(
                    f"Cannot complete a booking that is {booking.status}",
                    details={"booking_id": str(booking.id), "status": booking.status},
                )
            booking.complete()
            cls._save_transition(booking)
        except BaseApplicationError as exc:
            return ServiceResult.from_exception(exc)

        cls.get_logger().info("Booking completed", extra={"booking_id": str(booking.id)})
        return ServiceResult.success(booking)

    # ==========================================================================
    # Payment Outcomes
    # ==========================================================================

    @classmethod
    def apply_payment_outcome(cls, booking_id, succeeded: bool) -> bool:
        """
        Drive a booking from a processor-reported payment outcome.

        pending/pending_payment -> approved on success, -> rejected on
        failure. Any other status (terminal, or already approved) is left
        untouched, which makes duplicate and reordered events harmless.

        Args:
            booking_id: BookingRequest id taken from the payment intent
            succeeded: True for a successful payment, False for a failure

        Returns:
            True if the booking transitioned, False if this was a no-op.

        Raises:
            BookingStateError: The row kept changing under us; the caller
                should fail so the outcome is redelivered.
        """
        logger = cls.get_logger()
        extra = {"booking_id": str(booking_id), "payment_succeeded": succeeded}

        for _attempt in range(cls.MAX_TRANSITION_ATTEMPTS):
            booking = BookingRequest.objects.filter(id=booking_id).first()
            if booking is None:
                logger.warning("Payment outcome for unknown booking", extra=extra)
                return False

            transition_method = booking.confirm_payment if succeeded else booking.fail_payment
            if not can_proceed(transition_method):
                logger.info(
                    "Payment outcome ignored, booking not awaiting payment",
                    extra={**extra, "status": booking.status},
                )
                return False

            transition_method()
            try:
                cls._save_attempt(booking)
            except ConcurrentTransition:
                logger.info("Booking changed concurrently, reloading", extra=extra)
                continue

            logger.info(
                "Booking updated from payment outcome",
                extra={**extra, "status": booking.status},
            )
            return True

        logger.warning("Payment outcome not applied after retries", extra=extra)
        raise BookingStateError(
            "Booking kept changing while applying the payment outcome",
            error_code="BOOKING_CONCURRENT_UPDATE",
            details={"booking_id": str(booking_id)},
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _get_for_participant(cls, booking_id, user: User) -> BookingRequest:
        booking = BookingRequest.objects.for_participant(user).filter(id=booking_id).first()
        if booking is None:
            raise BookingNotFoundError(
                "Booking not found",
                details={"booking_id": str(booking_id)},
            )
        return booking

    @staticmethod
    def _save_attempt(booking: BookingRequest) -> None:
        """
        Save a transition inside its own savepoint.

        A lost compare-and-swap rolls back only the savepoint, so the caller's
        transaction can still reload the row and retry.
        """
        with transaction.atomic():
            booking.save()

    @classmethod
    def _save_transition(cls, booking: BookingRequest) -> None:
        """Save a user-initiated transition, surfacing a lost race as a conflict."""
        try:
            cls._save_attempt(booking)
        except ConcurrentTransition as exc:
            raise BookingStateError(
                "Booking was updated by someone else, please retry",
                error_code="BOOKING_CONCURRENT_UPDATE",
                details={"booking_id": str(booking.id)},
            ) from exc
