"""
Core models shared by every domain app.

Base Classes:
    BaseModel: Abstract model with timestamps (created_at, updated_at)

Concrete Models:
    PlatformSetting: Admin-editable key/value settings (commission rate, etc.)

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin

    class Listing(UUIDPrimaryKeyMixin, BaseModel):
        title = models.CharField(max_length=200)

Note:
    Always list mixins before BaseModel in inheritance.
"""

from __future__ import annotations

from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model providing common fields for all models.

    Fields:
        created_at: Automatically set when the object is first created
        updated_at: Automatically updated whenever the object is saved
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,  # Index for efficient time-based queries
        help_text="Timestamp when this record was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when this record was last modified",
    )

    class Meta:
        abstract = True
        # Default ordering by creation time (newest first)
        ordering = ["-created_at"]

    def __str__(self) -> str:
        """Default string representation using primary key."""
        return f"{self.__class__.__name__}(id={self.pk})"


class PlatformSetting(BaseModel):
    """
    Platform-wide setting editable from the admin.

    Values are stored as JSON so numbers, strings and flags share one table.
    Read them through core.settings_resolver, which applies typed fallbacks.

    Fields:
        key: Dotted setting name (e.g. "booking.commission_percent")
        value: JSON value
        description: Free-text note shown in the admin
    """

    key = models.CharField(
        max_length=128,
        unique=True,
        help_text="Dotted setting name, e.g. 'booking.commission_percent'",
    )
    value = models.JSONField(
        help_text="Setting value (JSON)",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="What this setting controls",
    )

    class Meta:
        ordering = ["key"]
        verbose_name = "Platform Setting"
        verbose_name_plural = "Platform Settings"

    def __str__(self) -> str:
        return f"{self.key}={self.value!r}"
