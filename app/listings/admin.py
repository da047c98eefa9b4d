"""
Django admin configuration for listings.
"""

from django.contrib import admin

from listings.models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    """Admin for listings, mostly used to approve them."""

    list_display = ("title", "provider", "monthly_rent", "is_active", "is_approved")
    list_filter = ("is_active", "is_approved")
    search_fields = ("title", "provider__email")
    raw_id_fields = ("provider",)
