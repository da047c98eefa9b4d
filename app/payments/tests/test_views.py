"""
Tests for the payments API views.
"""

import uuid
from decimal import Decimal

import pytest

from bookings.states import BookingStatus
from payments.adapters import StripeListPage
from payments.exceptions import StripeAPIUnavailableError
from payments.models import Payout
from payments.state_machines import PaymentIntentStatus
from payments.tests.factories import (
    PaymentIntentFactory,
    PayoutFactory,
    account_snapshot,
    balance_result,
    balance_transaction_result,
    intent_result,
    payout_result,
)


@pytest.mark.django_db
class TestBookingPaymentView:
    url = "/api/v1/payments/intents/"

    def payload(self, listing, **overrides):
        data = {
            "listing_id": str(listing.id),
            "check_in_date": "2026-01-01",
            "duration_months": 3,
        }
        data.update(overrides)
        return data

    def test_seeker_creates_payment(self, api_client, seeker, listing, provider_account, mock_stripe):
        mock_stripe.create_payment_intent.return_value = intent_result(id="pi_view")
        api_client.force_authenticate(user=seeker)

        response = api_client.post(self.url, self.payload(listing), format="json")

        assert response.status_code == 201
        data = response.data["data"]
        assert data["payment_intent_id"] == "pi_view"
        assert data["client_secret"] == "pi_view_secret_abc"
        assert data["booking_status"] == BookingStatus.PENDING_PAYMENT
        assert data["amount"] == 35000
        assert data["application_fee"] == 1050
        assert data["transfer_amount"] == 33950
        assert data["currency"] == "inr"

    def test_provider_not_ready_returns_400(self, api_client, seeker, listing, mock_stripe):
        api_client.force_authenticate(user=seeker)

        response = api_client.post(self.url, self.payload(listing), format="json")

        assert response.status_code == 400
        assert response.data == {
            "success": False,
            "error": "Provider payment setup is not complete. Please contact the provider.",
            "error_code": "PROVIDER_PAYMENT_NOT_READY",
        }

    def test_unknown_listing_returns_404(self, api_client, seeker, mock_stripe):
        api_client.force_authenticate(user=seeker)

        response = api_client.post(
            self.url,
            {"listing_id": str(uuid.uuid4()), "check_in_date": "2026-01-01", "duration_months": 3},
            format="json",
        )

        assert response.status_code == 404
        assert response.data["error_code"] == "LISTING_NOT_FOUND"

    def test_invalid_duration_returns_400(self, api_client, seeker, listing, mock_stripe):
        api_client.force_authenticate(user=seeker)

        response = api_client.post(self.url, self.payload(listing, duration_months=0), format="json")

        assert response.status_code == 400
        assert "duration_months" in response.data["errors"]
        mock_stripe.create_payment_intent.assert_not_called()

    def test_stripe_failure_returns_502(self, api_client, seeker, listing, provider_account, mock_stripe):
        mock_stripe.create_payment_intent.side_effect = StripeAPIUnavailableError(
            "Stripe is temporarily unavailable"
        )
        api_client.force_authenticate(user=seeker)

        response = api_client.post(self.url, self.payload(listing), format="json")

        assert response.status_code == 502
        assert response.data["error_code"] == "STRIPE_UNAVAILABLE"

    def test_provider_cannot_pay(self, api_client, provider, listing, mock_stripe):
        api_client.force_authenticate(user=provider)

        response = api_client.post(self.url, self.payload(listing), format="json")

        assert response.status_code == 403

    def test_anonymous_is_rejected(self, api_client, listing):
        response = api_client.post(self.url, self.payload(listing), format="json")

        assert response.status_code == 401


@pytest.mark.django_db
class TestPaymentRefreshView:
    def test_refresh_applies_stripe_state(self, api_client, mock_stripe):
        intent = PaymentIntentFactory()
        mock_stripe.retrieve_payment_intent.return_value = intent_result(
            id=intent.stripe_payment_intent_id, status="succeeded"
        )
        api_client.force_authenticate(user=intent.seeker)

        response = api_client.post(
            f"/api/v1/payments/intents/{intent.stripe_payment_intent_id}/refresh/"
        )

        assert response.status_code == 200
        assert response.data["data"]["status"] == PaymentIntentStatus.SUCCEEDED
        assert "client_secret" not in response.data["data"]

    def test_unknown_intent_returns_404(self, api_client, seeker, mock_stripe):
        api_client.force_authenticate(user=seeker)

        response = api_client.post("/api/v1/payments/intents/pi_missing/refresh/")

        assert response.status_code == 404
        assert response.data["error_code"] == "PAYMENT_NOT_FOUND"


@pytest.mark.django_db
class TestConnectViews:
    def test_onboard_returns_link(self, api_client, provider, mock_stripe):
        mock_stripe.create_connected_account.return_value = account_snapshot(
            id="acct_new", charges_enabled=False, payouts_enabled=False
        )
        mock_stripe.create_account_link.return_value = "https://connect.stripe.com/setup/abc"
        api_client.force_authenticate(user=provider)

        response = api_client.post("/api/v1/payments/connect/onboard/", {}, format="json")

        assert response.status_code == 200
        assert response.data["data"]["onboarding_url"] == "https://connect.stripe.com/setup/abc"
        assert response.data["data"]["account"]["stripe_account_id"] == "acct_new"

    def test_seeker_cannot_onboard(self, api_client, seeker, mock_stripe):
        api_client.force_authenticate(user=seeker)

        response = api_client.post("/api/v1/payments/connect/onboard/", {}, format="json")

        assert response.status_code == 403
        mock_stripe.create_connected_account.assert_not_called()

    def test_account_status(self, api_client, provider, provider_account, mock_stripe):
        mock_stripe.retrieve_account.return_value = account_snapshot(id="acct_provider")
        api_client.force_authenticate(user=provider)

        response = api_client.get("/api/v1/payments/connect/account/")

        assert response.status_code == 200
        assert response.data["data"]["status"] == "enabled"
        assert response.data["data"]["requires_verification"] is False

    def test_account_status_without_account(self, api_client, provider, mock_stripe):
        api_client.force_authenticate(user=provider)

        response = api_client.get("/api/v1/payments/connect/account/")

        assert response.status_code == 200
        assert response.data == {"success": True, "data": None}


@pytest.mark.django_db
class TestPaymentSummaryView:
    def test_returns_earnings_and_activity(self, api_client, provider):
        PaymentIntentFactory(
            provider=provider,
            status=PaymentIntentStatus.SUCCEEDED,
            amount=35000,
            application_fee_amount=1050,
        )
        PayoutFactory(provider=provider)
        api_client.force_authenticate(user=provider)

        response = api_client.get("/api/v1/payments/summary/")

        assert response.status_code == 200
        earnings = response.data["data"]["earnings"]
        assert earnings["total"] == 35000
        assert earnings["platform_fees"] == 1050
        assert earnings["net_total"] == 33950
        assert response.data["data"]["account"]["has_account"] is False
        activity = response.data["data"]["recent_activity"]
        assert len(activity["payment_intents"]) == 1
        assert len(activity["payouts"]) == 1

    def test_includes_live_balance_and_account_flags(
        self, api_client, provider, provider_account, mock_stripe
    ):
        mock_stripe.retrieve_balance.return_value = balance_result(
            available="1200.00", pending="300.00"
        )
        api_client.force_authenticate(user=provider)

        response = api_client.get("/api/v1/payments/summary/")

        assert response.status_code == 200
        account = response.data["data"]["account"]
        assert account["has_account"] is True
        assert account["charges_enabled"] is True
        assert account["payouts_enabled"] is True
        assert account["available"] == "1200.00"
        assert account["pending"] == "300.00"
        mock_stripe.retrieve_balance.assert_called_once_with("acct_provider")

    def test_stripe_transactions(self, api_client, provider, provider_account, mock_stripe):
        mock_stripe.list_balance_transactions.return_value = StripeListPage(
            items=[balance_transaction_result(id="txn_1"), balance_transaction_result(id="txn_2")],
            has_more=True,
        )
        api_client.force_authenticate(user=provider)

        response = api_client.get(
            "/api/v1/payments/summary/", {"type": "transactions", "limit": 2}
        )

        assert response.status_code == 200
        data = response.data["data"]
        assert [txn["id"] for txn in data["results"]] == ["txn_1", "txn_2"]
        assert data["results"][0]["amount"] == "33950.00"
        assert data["has_more"] is True
        assert data["next_cursor"] == "txn_2"
        mock_stripe.list_balance_transactions.assert_called_once_with(
            "acct_provider", limit=2, starting_after=None
        )

    def test_stripe_payouts_page_from_cursor(
        self, api_client, provider, provider_account, mock_stripe
    ):
        mock_stripe.list_payouts.return_value = StripeListPage(
            items=[payout_result(id="po_auto", status="paid")]
        )
        api_client.force_authenticate(user=provider)

        response = api_client.get(
            "/api/v1/payments/summary/", {"type": "payouts", "starting_after": "po_prev"}
        )

        assert response.status_code == 200
        data = response.data["data"]
        assert data["results"][0]["id"] == "po_auto"
        assert data["results"][0]["status"] == "paid"
        assert data["next_cursor"] is None
        mock_stripe.list_payouts.assert_called_once_with(
            "acct_provider", limit=20, starting_after="po_prev"
        )

    def test_unknown_type_is_rejected(self, api_client, provider, mock_stripe):
        api_client.force_authenticate(user=provider)

        response = api_client.get("/api/v1/payments/summary/", {"type": "refunds"})

        assert response.status_code == 400
        assert "type" in response.data["errors"]

    def test_seeker_is_forbidden(self, api_client, seeker):
        api_client.force_authenticate(user=seeker)

        response = api_client.get("/api/v1/payments/summary/")

        assert response.status_code == 403


@pytest.mark.django_db
class TestPayoutView:
    url = "/api/v1/payments/payouts/"

    def test_get_returns_eligibility_and_history(
        self, api_client, provider, provider_account, mock_stripe
    ):
        for _ in range(3):
            PayoutFactory(provider=provider)
        mock_stripe.retrieve_balance.return_value = balance_result()
        api_client.force_authenticate(user=provider)

        response = api_client.get(self.url, {"page": 1, "limit": 2})

        assert response.status_code == 200
        eligibility = response.data["data"]["eligibility"]
        assert eligibility["has_account"] is True
        assert eligibility["available"] == "10000.00"
        assert eligibility["can_request_payout"] is True
        history = response.data["data"]["history"]
        assert history["total"] == 3
        assert history["pages"] == 2
        assert len(history["results"]) == 2

    def test_get_rejects_oversized_limit(self, api_client, provider, mock_stripe):
        api_client.force_authenticate(user=provider)

        response = api_client.get(self.url, {"limit": 500})

        assert response.status_code == 400
        mock_stripe.retrieve_balance.assert_not_called()

    def test_post_creates_payout(self, api_client, provider, provider_account, mock_stripe):
        mock_stripe.retrieve_balance.return_value = balance_result()
        mock_stripe.create_payout.return_value = payout_result(id="po_view", amount="2500.00")
        api_client.force_authenticate(user=provider)

        response = api_client.post(
            self.url, {"amount": "2500.00", "method": "standard"}, format="json"
        )

        assert response.status_code == 201
        assert response.data["data"]["stripe_payout_id"] == "po_view"
        assert Payout.objects.get(stripe_payout_id="po_view").amount == Decimal("2500.00")

    def test_post_insufficient_balance(self, api_client, provider, provider_account, mock_stripe):
        mock_stripe.retrieve_balance.return_value = balance_result(available="100.00")
        api_client.force_authenticate(user=provider)

        response = api_client.post(self.url, {"amount": "100.01"}, format="json")

        assert response.status_code == 400
        assert response.data["error"] == "Insufficient balance. Available: 100.00 INR"
        assert response.data["error_code"] == "INSUFFICIENT_BALANCE"

    def test_post_rejects_unknown_method(self, api_client, provider, provider_account, mock_stripe):
        api_client.force_authenticate(user=provider)

        response = api_client.post(self.url, {"amount": "10.00", "method": "overnight"}, format="json")

        assert response.status_code == 400
        assert "method" in response.data["errors"]
        mock_stripe.create_payout.assert_not_called()
