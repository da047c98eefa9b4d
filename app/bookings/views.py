"""
API views for booking requests.

URL Structure:
    POST /api/v1/bookings/                  - Seeker creates a booking request
    POST /api/v1/bookings/{id}/cancel/      - Seeker or provider cancels
    POST /api/v1/bookings/{id}/respond/     - Provider approves or rejects

Views are thin: they validate input with a serializer, call BookingService
and render its ServiceResult through core.views.service_response.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsProvider, IsSeeker
from bookings.serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingRequestSerializer,
    BookingRespondSerializer,
)
from bookings.services import BookingService
from core.views import service_response
from listings.models import Listing


def _serialize_booking(booking):
    return BookingRequestSerializer(booking).data


class BookingCreateView(APIView):
    """
    Create a pending booking request.

    POST /api/v1/bookings/

    Response:
        201 Created: Booking created
        400 Bad Request: Invalid input or listing unavailable
        404 Not Found: Listing does not exist
        409 Conflict: Seeker already holds an active booking on the listing
    """

    permission_classes = [IsAuthenticated, IsSeeker]

    @extend_schema(
        operation_id="create_booking_request",
        summary="Create booking request",
        request=BookingCreateSerializer,
        responses={
            201: OpenApiResponse(response=BookingRequestSerializer, description="Booking created"),
            400: OpenApiResponse(description="Invalid input or listing unavailable"),
            404: OpenApiResponse(description="Listing not found"),
            409: OpenApiResponse(description="You have already requested this listing"),
        },
        tags=["Bookings"],
    )
    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"success": False, "error": "Invalid request", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = serializer.validated_data
        listing = Listing.objects.select_related("provider").filter(id=data["listing_id"]).first()
        if listing is None:
            return Response(
                {"success": False, "error": "Listing not found", "error_code": "LISTING_NOT_FOUND"},
                status=status.HTTP_404_NOT_FOUND,
            )

        result = BookingService.create_booking_request(
            seeker=request.user,
            listing=listing,
            requested_date=data["requested_date"],
            message=data["message"],
            duration_months=data.get("duration_months"),
        )
        return service_response(
            result,
            success_status=status.HTTP_201_CREATED,
            serialize=_serialize_booking,
        )


class BookingCancelView(APIView):
    """
    Cancel a pending or approved booking.

    POST /api/v1/bookings/{id}/cancel/

    Either participant may cancel. The reason defaults to who cancelled.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="cancel_booking_request",
        summary="Cancel booking",
        request=BookingCancelSerializer,
        responses={
            200: OpenApiResponse(response=BookingRequestSerializer, description="Booking cancelled"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="Booking cannot be cancelled in its current state"),
        },
        tags=["Bookings"],
    )
    def post(self, request, pk):
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = BookingService.cancel_booking(
            booking_id=pk,
            user=request.user,
            reason=serializer.validated_data["reason"],
        )
        return service_response(result, serialize=_serialize_booking)


class BookingRespondView(APIView):
    """
    Approve or reject a pending booking.

    POST /api/v1/bookings/{id}/respond/
    """

    permission_classes = [IsAuthenticated, IsProvider]

    @extend_schema(
        operation_id="respond_to_booking_request",
        summary="Approve or reject booking",
        request=BookingRespondSerializer,
        responses={
            200: OpenApiResponse(response=BookingRequestSerializer, description="Booking updated"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="Booking is no longer pending"),
        },
        tags=["Bookings"],
    )
    def post(self, request, pk):
        serializer = BookingRespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = BookingService.respond_to_booking(
            booking_id=pk,
            provider=request.user,
            action=serializer.validated_data["action"],
            response_message=serializer.validated_data["response_message"],
        )
        return service_response(result, serialize=_serialize_booking)
