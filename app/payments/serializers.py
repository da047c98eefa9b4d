"""
DRF serializers for payments app.

This module provides serializers for:
- Mirror rows (connected account, payment intent, transfer, payout)
- Checkout and payout request input
- Earnings summary, eligibility and payout history responses

Related files:
    - models/: ConnectedAccount, PaymentIntent, Transfer, Payout
    - views.py: Payment API views

Usage:
    serializer = PayoutSerializer(payout)
    data = serializer.data
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from payments.models import ConnectedAccount, PaymentIntent, Payout, Transfer
from payments.state_machines import PayoutMethod


# =============================================================================
# Mirror Rows
# =============================================================================


class ConnectedAccountSerializer(serializers.ModelSerializer):
    """Provider-facing view of the connected account mirror."""

    requires_verification = serializers.BooleanField(read_only=True)

    class Meta:
        model = ConnectedAccount
        fields = [
            "id",
            "stripe_account_id",
            "status",
            "charges_enabled",
            "payouts_enabled",
            "details_submitted",
            "requirements",
            "requires_verification",
            "disabled_reason",
            "country",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentIntentSerializer(serializers.ModelSerializer):
    """Payment intent mirror row. The client secret is never listed here."""

    booking_id = serializers.UUIDField(read_only=True)
    listing_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = PaymentIntent
        fields = [
            "id",
            "stripe_payment_intent_id",
            "booking_id",
            "listing_id",
            "amount",
            "currency",
            "status",
            "purpose",
            "commission_percentage",
            "application_fee_amount",
            "transfer_amount",
            "failure_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TransferSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transfer
        fields = [
            "id",
            "stripe_transfer_id",
            "amount",
            "currency",
            "status",
            "destination",
            "description",
            "created_at",
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = [
            "id",
            "stripe_payout_id",
            "amount",
            "currency",
            "method",
            "status",
            "origin",
            "description",
            "arrival_date",
            "failure_code",
            "failure_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# =============================================================================
# Request Input
# =============================================================================


class OnboardingRequestSerializer(serializers.Serializer):
    """Optional overrides for where Stripe sends the provider back."""

    refresh_url = serializers.URLField(required=False)
    return_url = serializers.URLField(required=False)


class BookingPaymentRequestSerializer(serializers.Serializer):
    """Input for POST /api/v1/payments/intents/."""

    listing_id = serializers.UUIDField()
    check_in_date = serializers.DateField()
    duration_months = serializers.IntegerField(min_value=1)
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class PayoutRequestSerializer(serializers.Serializer):
    """
    Input for POST /api/v1/payments/payouts/.

    Amount is in currency units with at most two decimal places.
    """

    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    method = serializers.ChoiceField(
        choices=PayoutMethod.choices,
        default=PayoutMethod.STANDARD,
    )


class PayoutHistoryQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)


class PaymentSummaryQuerySerializer(serializers.Serializer):
    """
    Query for GET /api/v1/payments/summary/.

    ``summary`` reads the mirror plus the live balance; ``transactions`` and
    ``payouts`` page through Stripe's own records with ``starting_after``.
    """

    TYPE_CHOICES = ("summary", "transactions", "payouts")

    type = serializers.ChoiceField(choices=TYPE_CHOICES, required=False, default="summary")
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)
    starting_after = serializers.CharField(required=False, allow_blank=True, default="")


# =============================================================================
# Responses
# =============================================================================


class BookingPaymentSerializer(serializers.Serializer):
    """Checkout result: what the frontend needs to confirm the payment."""

    payment_intent_id = serializers.CharField(source="payment_intent.stripe_payment_intent_id")
    client_secret = serializers.CharField()
    booking_id = serializers.UUIDField(source="booking.id")
    booking_status = serializers.CharField(source="booking.status")
    amount = serializers.IntegerField(source="charge.amount")
    application_fee = serializers.IntegerField(source="charge.application_fee")
    transfer_amount = serializers.IntegerField(source="charge.transfer_amount")
    currency = serializers.CharField(source="payment_intent.currency")


class OnboardingLinkSerializer(serializers.Serializer):
    onboarding_url = serializers.URLField()
    account = ConnectedAccountSerializer()


class EarningsSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    this_month = serializers.IntegerField()
    pending = serializers.IntegerField()
    platform_fees = serializers.IntegerField()
    net_total = serializers.IntegerField()
    currency = serializers.CharField()


class RecentActivitySerializer(serializers.Serializer):
    payment_intents = PaymentIntentSerializer(many=True)
    transfers = TransferSerializer(many=True)
    payouts = PayoutSerializer(many=True)


class PayoutEligibilitySerializer(serializers.Serializer):
    has_account = serializers.BooleanField()
    charges_enabled = serializers.BooleanField()
    payouts_enabled = serializers.BooleanField()
    account_status = serializers.CharField(allow_null=True)
    available = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    can_request_payout = serializers.BooleanField()


class PayoutHistorySerializer(serializers.Serializer):
    results = PayoutSerializer(many=True)
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total = serializers.IntegerField()
    pages = serializers.IntegerField()


class BalanceTransactionSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    net = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    status = serializers.CharField()
    created = serializers.DateTimeField(allow_null=True)
    available_on = serializers.DateField(allow_null=True)
    description = serializers.CharField(allow_null=True)
    source = serializers.CharField(allow_null=True)


class StripePayoutSerializer(serializers.Serializer):
    """A payout as Stripe reports it, whether or not it is mirrored locally."""

    id = serializers.CharField()
    status = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    method = serializers.CharField()
    arrival_date = serializers.DateField(allow_null=True)
    description = serializers.CharField(allow_null=True)
    failure_message = serializers.CharField(allow_null=True)


class BalanceTransactionPageSerializer(serializers.Serializer):
    results = BalanceTransactionSerializer(source="items", many=True)
    has_more = serializers.BooleanField()
    next_cursor = serializers.CharField(allow_null=True)


class StripePayoutPageSerializer(serializers.Serializer):
    results = StripePayoutSerializer(source="items", many=True)
    has_more = serializers.BooleanField()
    next_cursor = serializers.CharField(allow_null=True)
