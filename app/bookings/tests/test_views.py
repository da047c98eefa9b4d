"""
Tests for the bookings API views.
"""

import pytest
from django.urls import reverse

from authentication.tests.factories import ProviderFactory
from bookings.models import BookingRequest
from bookings.states import BookingStatus
from listings.tests.factories import ListingFactory


@pytest.mark.django_db
class TestBookingCreateView:
    url = "/api/v1/bookings/"

    def test_seeker_creates_booking(self, api_client, seeker, listing):
        api_client.force_authenticate(user=seeker)

        response = api_client.post(
            self.url,
            {"listing_id": str(listing.id), "requested_date": "2026-02-01", "duration_months": 2},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["success"] is True
        assert response.data["data"]["status"] == BookingStatus.PENDING
        assert response.data["data"]["message"] == "Booking request for 2 month(s)"

    def test_duplicate_returns_conflict(self, api_client, pending_booking):
        api_client.force_authenticate(user=pending_booking.seeker)

        response = api_client.post(
            self.url,
            {"listing_id": str(pending_booking.listing_id), "requested_date": "2026-02-01"},
            format="json",
        )

        assert response.status_code == 409
        assert response.data == {
            "success": False,
            "error": "You have already requested this listing",
            "error_code": "DUPLICATE_BOOKING",
        }

    def test_unknown_listing_returns_404(self, api_client, seeker):
        api_client.force_authenticate(user=seeker)

        response = api_client.post(
            self.url,
            {"listing_id": "00000000-0000-0000-0000-000000000000", "requested_date": "2026-02-01"},
            format="json",
        )

        assert response.status_code == 404

    def test_invalid_payload_returns_400(self, api_client, seeker):
        api_client.force_authenticate(user=seeker)

        response = api_client.post(self.url, {"listing_id": "nope"}, format="json")

        assert response.status_code == 400
        assert "listing_id" in response.data["errors"]

    def test_providers_cannot_book(self, api_client):
        listing = ListingFactory()
        api_client.force_authenticate(user=ProviderFactory())

        response = api_client.post(
            self.url,
            {"listing_id": str(listing.id), "requested_date": "2026-02-01"},
            format="json",
        )

        assert response.status_code == 403
        assert not BookingRequest.objects.exists()

    def test_requires_authentication(self, api_client, listing):
        response = api_client.post(
            self.url,
            {"listing_id": str(listing.id), "requested_date": "2026-02-01"},
            format="json",
        )

        assert response.status_code == 401


@pytest.mark.django_db
class TestBookingCancelView:
    def test_seeker_cancels(self, api_client, pending_booking):
        api_client.force_authenticate(user=pending_booking.seeker)

        response = api_client.post(
            reverse("bookings:booking-cancel", kwargs={"pk": pending_booking.id}),
            {"reason": "Changed my mind"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["data"]["status"] == BookingStatus.CANCELLED
        assert response.data["data"]["cancellation_reason"] == "Changed my mind"

    def test_cannot_cancel_pending_payment(self, api_client, pending_payment_booking):
        api_client.force_authenticate(user=pending_payment_booking.seeker)

        response = api_client.post(
            reverse("bookings:booking-cancel", kwargs={"pk": pending_payment_booking.id}),
            format="json",
        )

        assert response.status_code == 409
        assert response.data["error_code"] == "INVALID_BOOKING_STATE"


@pytest.mark.django_db
class TestBookingRespondView:
    def test_provider_approves(self, api_client, pending_booking):
        api_client.force_authenticate(user=pending_booking.provider)

        response = api_client.post(
            reverse("bookings:booking-respond", kwargs={"pk": pending_booking.id}),
            {"action": "approve", "response_message": "See you soon"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["data"]["status"] == BookingStatus.APPROVED

    def test_seeker_cannot_respond(self, api_client, pending_booking):
        api_client.force_authenticate(user=pending_booking.seeker)

        response = api_client.post(
            reverse("bookings:booking-respond", kwargs={"pk": pending_booking.id}),
            {"action": "approve"},
            format="json",
        )

        assert response.status_code == 403
