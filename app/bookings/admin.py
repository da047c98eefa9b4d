"""
Django admin configuration for bookings.
"""

from django.contrib import admin

from bookings.models import BookingRequest


@admin.register(BookingRequest)
class BookingRequestAdmin(admin.ModelAdmin):
    """Read-mostly admin; status only changes through the service layer."""

    list_display = ("id", "listing", "seeker", "provider", "status", "requested_date", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "seeker__email", "provider__email", "listing__title")
    raw_id_fields = ("seeker", "provider", "listing")
    readonly_fields = ("status", "responded_at", "cancelled_at", "created_at", "updated_at")
