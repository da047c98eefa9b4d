"""
Tests for the BookingRequest state machine and uniqueness constraint.
"""

import pytest
from django.db import IntegrityError, transaction
from django_fsm import ConcurrentTransition, TransitionNotAllowed

from bookings.models import BookingRequest
from bookings.states import (
    PAYMENT_FAILED_MESSAGE,
    PAYMENT_SUCCEEDED_MESSAGE,
    BookingStatus,
)
from bookings.tests.factories import BookingRequestFactory


@pytest.mark.django_db
class TestBookingTransitions:
    def test_begin_checkout_from_pending(self, pending_booking):
        pending_booking.begin_checkout()
        pending_booking.save()

        pending_booking.refresh_from_db()
        assert pending_booking.status == BookingStatus.PENDING_PAYMENT

    def test_begin_checkout_is_repeatable(self, pending_payment_booking):
        pending_payment_booking.begin_checkout()
        pending_payment_booking.save()

        assert pending_payment_booking.status == BookingStatus.PENDING_PAYMENT

    def test_confirm_payment_sets_canned_message(self, pending_payment_booking):
        pending_payment_booking.confirm_payment()
        pending_payment_booking.save()

        pending_payment_booking.refresh_from_db()
        assert pending_payment_booking.status == BookingStatus.APPROVED
        assert pending_payment_booking.response_message == PAYMENT_SUCCEEDED_MESSAGE
        assert pending_payment_booking.responded_at is not None

    def test_fail_payment_rejects(self, pending_payment_booking):
        pending_payment_booking.fail_payment()
        pending_payment_booking.save()

        assert pending_payment_booking.status == BookingStatus.REJECTED
        assert pending_payment_booking.response_message == PAYMENT_FAILED_MESSAGE

    def test_cancel_from_approved(self, approved_booking):
        approved_booking.cancel(reason="Plans changed")
        approved_booking.save()

        assert approved_booking.status == BookingStatus.CANCELLED
        assert approved_booking.cancellation_reason == "Plans changed"
        assert approved_booking.cancelled_at is not None

    def test_complete_from_approved(self, approved_booking):
        approved_booking.complete()
        approved_booking.save()

        assert approved_booking.status == BookingStatus.COMPLETED

    def test_cannot_cancel_pending_payment(self, pending_payment_booking):
        with pytest.raises(TransitionNotAllowed):
            pending_payment_booking.cancel()

    def test_cannot_checkout_approved_booking(self, approved_booking):
        with pytest.raises(TransitionNotAllowed):
            approved_booking.begin_checkout()

    @pytest.mark.parametrize("status", BookingStatus.terminal_states())
    def test_terminal_states_have_no_exits(self, status):
        booking = BookingRequestFactory(status=status)

        assert booking.is_terminal
        for method in (
            booking.begin_checkout,
            booking.confirm_payment,
            booking.fail_payment,
            booking.approve,
            booking.reject,
            booking.cancel,
            booking.complete,
        ):
            with pytest.raises(TransitionNotAllowed):
                method()


@pytest.mark.django_db
class TestConcurrentSave:
    def test_stale_instance_cannot_overwrite_newer_state(self, pending_payment_booking):
        first = BookingRequest.objects.get(id=pending_payment_booking.id)
        second = BookingRequest.objects.get(id=pending_payment_booking.id)

        first.confirm_payment()
        first.save()

        second.fail_payment()
        with pytest.raises(ConcurrentTransition), transaction.atomic():
            second.save()

        pending_payment_booking.refresh_from_db()
        assert pending_payment_booking.status == BookingStatus.APPROVED


@pytest.mark.django_db
class TestActiveBookingConstraint:
    @pytest.mark.parametrize("status", BookingStatus.active_states())
    def test_second_active_booking_is_rejected(self, seeker, listing, status):
        BookingRequestFactory(seeker=seeker, listing=listing, status=status)

        with pytest.raises(IntegrityError), transaction.atomic():
            BookingRequestFactory(seeker=seeker, listing=listing)

    @pytest.mark.parametrize("status", BookingStatus.terminal_states())
    def test_new_booking_allowed_after_terminal(self, seeker, listing, status):
        BookingRequestFactory(seeker=seeker, listing=listing, status=status)

        booking = BookingRequestFactory(seeker=seeker, listing=listing)

        assert BookingRequest.objects.active().get() == booking

    def test_other_seekers_can_request_same_listing(self, pending_booking, listing):
        other = BookingRequestFactory(listing=listing)

        assert BookingRequest.objects.filter(listing=listing).count() == 2
        assert other.seeker_id != pending_booking.seeker_id
