"""
URL configuration for bookings.

Mounted at /api/v1/bookings/ by config.urls.
"""

from django.urls import path

from bookings.views import BookingCancelView, BookingCreateView, BookingRespondView

app_name = "bookings"

urlpatterns = [
    path("", BookingCreateView.as_view(), name="booking-create"),
    path("<uuid:pk>/cancel/", BookingCancelView.as_view(), name="booking-cancel"),
    path("<uuid:pk>/respond/", BookingRespondView.as_view(), name="booking-respond"),
]
