"""
Pytest fixtures for booking tests.
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import SeekerFactory
from bookings.states import BookingStatus
from bookings.tests.factories import BookingRequestFactory
from listings.tests.factories import ListingFactory


@pytest.fixture
def seeker(db):
    return SeekerFactory()


@pytest.fixture
def listing(db):
    return ListingFactory()


@pytest.fixture
def provider(listing):
    return listing.provider


@pytest.fixture
def pending_booking(seeker, listing):
    return BookingRequestFactory(seeker=seeker, listing=listing)


@pytest.fixture
def pending_payment_booking(seeker, listing):
    return BookingRequestFactory(
        seeker=seeker,
        listing=listing,
        status=BookingStatus.PENDING_PAYMENT,
    )


@pytest.fixture
def approved_booking(seeker, listing):
    return BookingRequestFactory(
        seeker=seeker,
        listing=listing,
        status=BookingStatus.APPROVED,
    )


@pytest.fixture
def api_client():
    return APIClient()
