"""
Booking-specific exceptions.

Exception Hierarchy:
    NotFoundError
    └── BookingNotFoundError - Booking missing or not visible to the user
    ConflictError
    ├── DuplicateBookingError - Active booking already exists for seeker+listing
    └── BookingStateError - Transition not legal from the current status
"""

from __future__ import annotations

from core.exceptions import ConflictError, NotFoundError

DUPLICATE_BOOKING_MESSAGE = "You have already requested this listing"


class BookingNotFoundError(NotFoundError):
    """Raised when a booking cannot be found for the requesting user."""

    default_error_code: str = "BOOKING_NOT_FOUND"


class DuplicateBookingError(ConflictError):
    """
    Raised when the one-active-booking constraint rejects an insert.

    Derived from the database IntegrityError, never from a pre-check, so two
    concurrent requests can't both pass.
    """

    default_error_code: str = "DUPLICATE_BOOKING"

    def __init__(self, message: str = DUPLICATE_BOOKING_MESSAGE, **kwargs):
        super().__init__(message, **kwargs)


class BookingStateError(ConflictError):
    """Raised when a user-initiated transition is not legal for the booking."""

    default_error_code: str = "INVALID_BOOKING_STATE"


__all__ = [
    "BookingNotFoundError",
    "DuplicateBookingError",
    "BookingStateError",
    "DUPLICATE_BOOKING_MESSAGE",
]
