"""
Tests for BookingService.
"""

from datetime import date
from unittest.mock import patch

import pytest
from django.db import IntegrityError

from authentication.tests.factories import ProviderFactory, SeekerFactory
from bookings.exceptions import BookingStateError
from bookings.models import BookingRequest
from bookings.services import BookingService
from bookings.states import PAYMENT_SUCCEEDED_MESSAGE, BookingStatus
from bookings.tests.factories import BookingRequestFactory
from listings.tests.factories import ListingFactory


def competing_writer(booking_id, status):
    """Move the booking to ``status`` right before the first save lands."""
    original_save = BookingRequest.save
    moved = []

    def save(self, *args, **kwargs):
        if not moved:
            moved.append(status)
            BookingRequest.objects.filter(id=booking_id).update(status=status)
        return original_save(self, *args, **kwargs)

    return patch.object(BookingRequest, "save", save)


@pytest.mark.django_db
class TestCreateBookingRequest:
    def test_creates_pending_booking_with_default_message(self, seeker, listing):
        result = BookingService.create_booking_request(
            seeker=seeker,
            listing=listing,
            requested_date=date(2026, 2, 1),
            duration_months=3,
        )

        assert result.success
        booking = result.data
        assert booking.status == BookingStatus.PENDING
        assert booking.provider == listing.provider
        assert booking.message == "Booking request for 3 month(s)"

    def test_duplicate_active_booking_fails_with_integrity_message(self, seeker, listing):
        BookingService.create_booking_request(seeker, listing, date(2026, 2, 1))

        result = BookingService.create_booking_request(seeker, listing, date(2026, 3, 1))

        assert not result.success
        assert result.error == "You have already requested this listing"
        assert result.error_code == "DUPLICATE_BOOKING"
        assert result.status_code == 409
        assert BookingRequest.objects.filter(seeker=seeker, listing=listing).count() == 1

    def test_allowed_again_after_cancellation(self, seeker, listing):
        first = BookingService.create_booking_request(seeker, listing, date(2026, 2, 1)).data
        BookingService.cancel_booking(first.id, seeker)

        result = BookingService.create_booking_request(seeker, listing, date(2026, 3, 1))

        assert result.success
        assert result.data.id != first.id

    def test_unavailable_listing_is_refused(self, seeker):
        listing = ListingFactory(is_approved=False)

        result = BookingService.create_booking_request(seeker, listing, date(2026, 2, 1))

        assert not result.success
        assert result.error_code == "LISTING_UNAVAILABLE"
        assert not BookingRequest.objects.exists()

    def test_other_integrity_errors_are_not_reported_as_duplicates(self, seeker, listing):
        with pytest.raises(IntegrityError):
            BookingService.create_booking_request(seeker, listing, requested_date=None)

        assert not BookingRequest.objects.exists()


@pytest.mark.django_db
class TestStartCheckout:
    def test_creates_pending_payment_booking(self, seeker, listing):
        booking = BookingService.start_checkout(seeker, listing, date(2026, 2, 1), 3)

        assert booking.status == BookingStatus.PENDING_PAYMENT
        assert booking.duration_months == 3
        assert booking.message == "Booking request for 3 month(s)"

    def test_resumes_existing_pending_booking(self, pending_booking):
        booking = BookingService.start_checkout(
            pending_booking.seeker,
            pending_booking.listing,
            date(2026, 5, 1),
            6,
            message="Moving in May",
        )

        assert booking.id == pending_booking.id
        assert booking.status == BookingStatus.PENDING_PAYMENT
        assert booking.requested_date == date(2026, 5, 1)
        assert booking.message == "Moving in May"
        assert BookingRequest.objects.count() == 1

    def test_repeated_checkout_reuses_booking(self, seeker, listing):
        first = BookingService.start_checkout(seeker, listing, date(2026, 2, 1), 3)
        second = BookingService.start_checkout(seeker, listing, date(2026, 2, 1), 3)

        assert first.id == second.id
        assert BookingRequest.objects.count() == 1

    def test_approved_booking_is_not_charged_again(self, approved_booking):
        with pytest.raises(BookingStateError) as exc_info:
            BookingService.start_checkout(
                approved_booking.seeker,
                approved_booking.listing,
                date(2026, 2, 1),
                3,
            )

        assert exc_info.value.error_code == "BOOKING_ALREADY_CONFIRMED"

    def test_lost_race_reloads_and_sees_the_winner(self, pending_booking):
        with competing_writer(pending_booking.id, BookingStatus.APPROVED):
            with pytest.raises(BookingStateError) as exc_info:
                BookingService.start_checkout(
                    pending_booking.seeker,
                    pending_booking.listing,
                    date(2026, 2, 1),
                    3,
                )

        assert exc_info.value.error_code == "BOOKING_ALREADY_CONFIRMED"
        pending_booking.refresh_from_db()
        assert pending_booking.status == BookingStatus.APPROVED


@pytest.mark.django_db
class TestApplyPaymentOutcome:
    def test_success_approves_pending_payment_booking(self, pending_payment_booking):
        applied = BookingService.apply_payment_outcome(pending_payment_booking.id, succeeded=True)

        pending_payment_booking.refresh_from_db()
        assert applied is True
        assert pending_payment_booking.status == BookingStatus.APPROVED
        assert pending_payment_booking.response_message == PAYMENT_SUCCEEDED_MESSAGE

    def test_duplicate_success_is_a_no_op(self, pending_payment_booking):
        BookingService.apply_payment_outcome(pending_payment_booking.id, succeeded=True)
        pending_payment_booking.refresh_from_db()
        responded_at = pending_payment_booking.responded_at

        applied = BookingService.apply_payment_outcome(pending_payment_booking.id, succeeded=True)

        pending_payment_booking.refresh_from_db()
        assert applied is False
        assert pending_payment_booking.status == BookingStatus.APPROVED
        assert pending_payment_booking.responded_at == responded_at

    def test_failure_rejects(self, pending_payment_booking):
        BookingService.apply_payment_outcome(pending_payment_booking.id, succeeded=False)

        pending_payment_booking.refresh_from_db()
        assert pending_payment_booking.status == BookingStatus.REJECTED

    def test_failure_after_success_does_not_reject(self, pending_payment_booking):
        BookingService.apply_payment_outcome(pending_payment_booking.id, succeeded=True)

        applied = BookingService.apply_payment_outcome(pending_payment_booking.id, succeeded=False)

        pending_payment_booking.refresh_from_db()
        assert applied is False
        assert pending_payment_booking.status == BookingStatus.APPROVED

    @pytest.mark.parametrize("status", BookingStatus.terminal_states())
    def test_terminal_bookings_are_untouched(self, status):
        booking = BookingRequestFactory(status=status)

        assert BookingService.apply_payment_outcome(booking.id, succeeded=True) is False

        booking.refresh_from_db()
        assert booking.status == status

    def test_lost_race_is_a_no_op(self, pending_payment_booking):
        with competing_writer(pending_payment_booking.id, BookingStatus.APPROVED):
            applied = BookingService.apply_payment_outcome(
                pending_payment_booking.id, succeeded=False
            )

        assert applied is False
        pending_payment_booking.refresh_from_db()
        assert pending_payment_booking.status == BookingStatus.APPROVED

    def test_unknown_booking_is_a_no_op(self):
        assert BookingService.apply_payment_outcome(
            "00000000-0000-0000-0000-000000000000", succeeded=True
        ) is False


@pytest.mark.django_db
class TestCancelBooking:
    def test_seeker_cancel_uses_default_reason(self, pending_booking):
        result = BookingService.cancel_booking(pending_booking.id, pending_booking.seeker)

        assert result.success
        assert result.data.status == BookingStatus.CANCELLED
        assert result.data.cancellation_reason == "Cancelled by seeker"

    def test_provider_cancel_uses_default_reason(self, approved_booking):
        result = BookingService.cancel_booking(approved_booking.id, approved_booking.provider)

        assert result.success
        assert result.data.cancellation_reason == "Cancelled by provider"

    def test_custom_reason_is_kept(self, pending_booking):
        result = BookingService.cancel_booking(
            pending_booking.id, pending_booking.seeker, reason="Found another place"
        )

        assert result.data.cancellation_reason == "Found another place"

    def test_outsider_gets_not_found(self, pending_booking):
        result = BookingService.cancel_booking(pending_booking.id, SeekerFactory())

        assert not result.success
        assert result.error_code == "BOOKING_NOT_FOUND"
        assert result.status_code == 404

    def test_terminal_booking_cannot_be_cancelled(self):
        booking = BookingRequestFactory(status=BookingStatus.REJECTED)

        result = BookingService.cancel_booking(booking.id, booking.seeker)

        assert not result.success
        assert result.error_code == "INVALID_BOOKING_STATE"
        assert result.status_code == 409


@pytest.mark.django_db
class TestRespondToBooking:
    def test_provider_approves(self, pending_booking):
        result = BookingService.respond_to_booking(
            pending_booking.id, pending_booking.provider, "approve", "Welcome!"
        )

        assert result.success
        assert result.data.status == BookingStatus.APPROVED
        assert result.data.response_message == "Welcome!"

    def test_provider_rejects(self, pending_booking):
        result = BookingService.respond_to_booking(
            pending_booking.id, pending_booking.provider, "reject"
        )

        assert result.data.status == BookingStatus.REJECTED

    def test_other_provider_cannot_respond(self, pending_booking):
        result = BookingService.respond_to_booking(pending_booking.id, ProviderFactory(), "approve")

        assert result.error_code == "BOOKING_NOT_FOUND"

    def test_pending_payment_cannot_be_approved_by_hand(self, pending_payment_booking):
        result = BookingService.respond_to_booking(
            pending_payment_booking.id, pending_payment_booking.provider, "approve"
        )

        assert not result.success
        assert result.error_code == "INVALID_BOOKING_STATE"

    def test_unknown_action(self, pending_booking):
        result = BookingService.respond_to_booking(
            pending_booking.id, pending_booking.provider, "maybe"
        )

        assert result.error_code == "VALIDATION_ERROR"


@pytest.mark.django_db
class TestCompleteBooking:
    def test_approved_booking_completes(self, approved_booking):
        result = BookingService.complete_booking(approved_booking.id)

        assert result.success
        assert result.data.status == BookingStatus.COMPLETED

    def test_pending_booking_cannot_complete(self, pending_booking):
        result = BookingService.complete_booking(pending_booking.id)

        assert not result.success
