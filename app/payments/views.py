"""
API views for payments.

URL Structure:
    POST /api/v1/payments/connect/onboard/                - Start provider onboarding
    GET  /api/v1/payments/connect/account/                - Refresh and show the connected account
    POST /api/v1/payments/intents/                        - Seeker checkout for a booking
    POST /api/v1/payments/intents/{intent_id}/refresh/    - Re-read an intent from Stripe
    GET  /api/v1/payments/summary/                        - Provider earnings, live balance, activity
    GET  /api/v1/payments/summary/?type=transactions      - Stripe balance transactions
    GET  /api/v1/payments/summary/?type=payouts           - Stripe payouts
    GET  /api/v1/payments/payouts/                        - Payout eligibility and history
    POST /api/v1/payments/payouts/                        - Request a payout

The Stripe webhook lives in payments.webhooks.views and is mounted
separately because it is not an authenticated API endpoint.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsProvider, IsSeeker
from core.services import ServiceResult
from core.views import service_response
from listings.models import Listing
from payments.ledger import ledger_mirror
from payments.serializers import (
    BalanceTransactionPageSerializer,
    BookingPaymentRequestSerializer,
    BookingPaymentSerializer,
    ConnectedAccountSerializer,
    EarningsSummarySerializer,
    OnboardingLinkSerializer,
    OnboardingRequestSerializer,
    PaymentIntentSerializer,
    PaymentSummaryQuerySerializer,
    PayoutEligibilitySerializer,
    PayoutHistoryQuerySerializer,
    PayoutHistorySerializer,
    PayoutRequestSerializer,
    PayoutSerializer,
    RecentActivitySerializer,
    StripePayoutPageSerializer,
)
from payments.services import ConnectedAccountService, PaymentOrchestrator, PayoutService


def _invalid(serializer) -> Response:
    return Response(
        {"success": False, "error": "Invalid request", "errors": serializer.errors},
        status=status.HTTP_400_BAD_REQUEST,
    )


# =============================================================================
# Connected Account
# =============================================================================


class ConnectOnboardView(APIView):
    """
    Create the provider's connected account (if needed) and an onboarding link.

    POST /api/v1/payments/connect/onboard/
    """

    permission_classes = [IsAuthenticated, IsProvider]

    @extend_schema(
        operation_id="start_connect_onboarding",
        summary="Start payment account onboarding",
        request=OnboardingRequestSerializer,
        responses={
            200: OpenApiResponse(response=OnboardingLinkSerializer, description="Onboarding link"),
            502: OpenApiResponse(description="Stripe unavailable"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = OnboardingRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        result = ConnectedAccountService.start_onboarding(
            provider=request.user,
            refresh_url=serializer.validated_data.get("refresh_url"),
            return_url=serializer.validated_data.get("return_url"),
        )
        return service_response(
            result,
            serialize=lambda link: OnboardingLinkSerializer(link).data,
        )


class ConnectAccountView(APIView):
    """
    Refresh the provider's connected account from Stripe and return it.

    GET /api/v1/payments/connect/account/

    Returns data null when the provider has not started onboarding.
    """

    permission_classes = [IsAuthenticated, IsProvider]

    @extend_schema(
        operation_id="get_connect_account",
        summary="Get payment account status",
        responses={
            200: OpenApiResponse(response=ConnectedAccountSerializer, description="Account status"),
            502: OpenApiResponse(description="Stripe unavailable"),
        },
        tags=["Payments"],
    )
    def get(self, request):
        result = ConnectedAccountService.refresh_account(request.user)
        return service_response(
            result,
            serialize=lambda account: (
                ConnectedAccountSerializer(account).data if account is not None else None
            ),
        )


# =============================================================================
# Booking Payments
# =============================================================================


class BookingPaymentView(APIView):
    """
    Start or resume checkout for a booking.

    POST /api/v1/payments/intents/

    Response:
        201 Created: Intent created, client_secret returned
        400 Bad Request: Listing unavailable or provider not ready
        404 Not Found: Listing does not exist
        409 Conflict: Booking already confirmed
        502 Bad Gateway: Stripe rejected or was unreachable
    """

    permission_classes = [IsAuthenticated, IsSeeker]

    @extend_schema(
        operation_id="create_booking_payment",
        summary="Create booking payment",
        request=BookingPaymentRequestSerializer,
        responses={
            201: OpenApiResponse(response=BookingPaymentSerializer, description="Payment created"),
            400: OpenApiResponse(description="Provider payment setup is not complete"),
            404: OpenApiResponse(description="Listing not found"),
            409: OpenApiResponse(description="Booking already confirmed"),
            502: OpenApiResponse(description="Stripe error"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = BookingPaymentRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        data = serializer.validated_data
        listing = Listing.objects.select_related("provider").filter(id=data["listing_id"]).first()
        if listing is None:
            return Response(
                {"success": False, "error": "Listing not found", "error_code": "LISTING_NOT_FOUND"},
                status=status.HTTP_404_NOT_FOUND,
            )

        result = PaymentOrchestrator.create_booking_payment(
            seeker=request.user,
            listing=listing,
            check_in_date=data["check_in_date"],
            duration_months=data["duration_months"],
            message=data["message"],
        )
        return service_response(
            result,
            success_status=status.HTTP_201_CREATED,
            serialize=lambda payment: BookingPaymentSerializer(payment).data,
        )


class PaymentRefreshView(APIView):
    """
    Re-read a payment intent from Stripe and apply it to the booking.

    POST /api/v1/payments/intents/{intent_id}/refresh/
    """

    permission_classes = [IsAuthenticated, IsSeeker]

    @extend_schema(
        operation_id="refresh_booking_payment",
        summary="Refresh payment status",
        request=None,
        responses={
            200: OpenApiResponse(response=PaymentIntentSerializer, description="Refreshed intent"),
            404: OpenApiResponse(description="Payment intent not found"),
            502: OpenApiResponse(description="Stripe error"),
        },
        tags=["Payments"],
    )
    def post(self, request, intent_id):
        result = PaymentOrchestrator.refresh_payment(request.user, intent_id)
        return service_response(
            result,
            serialize=lambda intent: PaymentIntentSerializer(intent).data,
        )


# =============================================================================
# Provider Earnings & Payouts
# =============================================================================


class PaymentSummaryView(APIView):
    """
    Provider earnings, live balance and Stripe-side history.

    GET /api/v1/payments/summary/                                   - mirror aggregates + live balance
    GET /api/v1/payments/summary/?type=transactions&limit=20        - Stripe balance transactions
    GET /api/v1/payments/summary/?type=payouts&starting_after=po_x  - Stripe payouts
    """

    permission_classes = [IsAuthenticated, IsProvider]

    @extend_schema(
        operation_id="get_payment_summary",
        summary="Earnings summary",
        parameters=[
            OpenApiParameter(
                "type",
                str,
                enum=list(PaymentSummaryQuerySerializer.TYPE_CHOICES),
                description="summary (default), transactions or payouts",
            ),
            OpenApiParameter("limit", int, description="Stripe page size (default 20, max 100)"),
            OpenApiParameter("starting_after", str, description="next_cursor of the previous page"),
        ],
        responses={
            200: OpenApiResponse(description="Earnings, balance and recent activity"),
            400: OpenApiResponse(description="Invalid query"),
            502: OpenApiResponse(description="Stripe error"),
        },
        tags=["Payments"],
    )
    def get(self, request):
        query = PaymentSummaryQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return _invalid(query)

        summary_type = query.validated_data["type"]
        limit = query.validated_data["limit"]
        starting_after = query.validated_data["starting_after"] or None

        if summary_type == "transactions":
            result = ConnectedAccountService.list_balance_transactions(
                request.user, limit=limit, starting_after=starting_after
            )
            return service_response(
                result, serialize=lambda page: BalanceTransactionPageSerializer(page).data
            )

        if summary_type == "payouts":
            result = ConnectedAccountService.list_payouts(
                request.user, limit=limit, starting_after=starting_after
            )
            return service_response(
                result, serialize=lambda page: StripePayoutPageSerializer(page).data
            )

        # Live balance and account flags; no Stripe call before onboarding
        account = PayoutService.get_payout_eligibility(request.user)
        if not account.success:
            return service_response(account)

        summary = ledger_mirror.earnings_summary(request.user)
        activity = ledger_mirror.recent_activity(request.user)
        return service_response(
            ServiceResult.success(
                {
                    "account": PayoutEligibilitySerializer(account.data).data,
                    "earnings": EarningsSummarySerializer(summary).data,
                    "recent_activity": RecentActivitySerializer(activity).data,
                }
            )
        )


class PayoutView(APIView):
    """
    Payout eligibility, history and requests.

    GET  /api/v1/payments/payouts/?page=1&limit=10
    POST /api/v1/payments/payouts/
    """

    permission_classes = [IsAuthenticated, IsProvider]

    @extend_schema(
        operation_id="get_payouts",
        summary="Payout eligibility and history",
        parameters=[
            OpenApiParameter("page", int, description="Page number (default 1)"),
            OpenApiParameter("limit", int, description="Page size (default 10, max 100)"),
        ],
        responses={
            200: OpenApiResponse(description="Eligibility and payout history"),
            502: OpenApiResponse(description="Stripe error"),
        },
        tags=["Payments"],
    )
    def get(self, request):
        query = PayoutHistoryQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return _invalid(query)

        eligibility = PayoutService.get_payout_eligibility(request.user)
        if not eligibility.success:
            return service_response(eligibility)

        history = ledger_mirror.payout_history(
            request.user,
            page=query.validated_data["page"],
            limit=query.validated_data["limit"],
        )
        return service_response(
            ServiceResult.success(
                {
                    "eligibility": PayoutEligibilitySerializer(eligibility.data).data,
                    "history": PayoutHistorySerializer(history).data,
                }
            )
        )

    @extend_schema(
        operation_id="request_payout",
        summary="Request payout",
        request=PayoutRequestSerializer,
        responses={
            201: OpenApiResponse(response=PayoutSerializer, description="Payout created"),
            400: OpenApiResponse(description="Payouts not enabled or insufficient balance"),
            502: OpenApiResponse(description="Stripe error"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = PayoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)

        result = PayoutService.request_payout(
            provider=request.user,
            amount=serializer.validated_data["amount"],
            method=serializer.validated_data["method"],
        )
        return service_response(
            result,
            success_status=status.HTTP_201_CREATED,
            serialize=lambda payout: PayoutSerializer(payout).data,
        )
