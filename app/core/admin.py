"""
Django admin configuration for core models.
"""

from django.contrib import admin

from core.models import PlatformSetting


@admin.register(PlatformSetting)
class PlatformSettingAdmin(admin.ModelAdmin):
    """Admin for platform-wide settings (commission rate, etc.)."""

    list_display = ("key", "value", "updated_at")
    search_fields = ("key", "description")
    readonly_fields = ("created_at", "updated_at")
