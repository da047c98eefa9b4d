"""
Serializers for the bookings API.

Serializer Hierarchy:
    BookingRequestSerializer: Read representation
    BookingCreateSerializer: Seeker creates a pending request
    BookingCancelSerializer: Optional cancellation reason
    BookingRespondSerializer: Provider approves or rejects
"""

from __future__ import annotations

from rest_framework import serializers

from bookings.models import BookingRequest
from bookings.services import BookingService


class BookingRequestSerializer(serializers.ModelSerializer):
    """Read-only booking representation returned by every booking endpoint."""

    listing_id = serializers.UUIDField(read_only=True)
    seeker_id = serializers.IntegerField(read_only=True)
    provider_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = BookingRequest
        fields = [
            "id",
            "listing_id",
            "seeker_id",
            "provider_id",
            "status",
            "requested_date",
            "duration_months",
            "message",
            "response_message",
            "responded_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """Input for POST /api/v1/bookings/."""

    listing_id = serializers.UUIDField()
    requested_date = serializers.DateField()
    duration_months = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class BookingCancelSerializer(serializers.Serializer):
    """Input for POST /api/v1/bookings/{id}/cancel/."""

    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=1000)


class BookingRespondSerializer(serializers.Serializer):
    """Input for POST /api/v1/bookings/{id}/respond/."""

    action = serializers.ChoiceField(choices=BookingService.RESPOND_ACTIONS)
    response_message = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=2000
    )
