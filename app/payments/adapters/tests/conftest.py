"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
mock Stripe API responses, error conditions, and test data.

Sections:
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Mock Stripe Client Fixtures
"""

from typing import Any
from unittest.mock import patch

import pytest
import stripe

from payments.adapters import StripeAdapter


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


class MockStripeObject(dict):
    """Dict with attribute access, the shape of stripe.StripeObject."""

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return self.get(name)


@pytest.fixture
def mock_account():
    """Create a mock connected Account response."""

    def _create(
        id: str = "acct_test123",
        charges_enabled: bool = False,
        payouts_enabled: bool = False,
        details_submitted: bool = False,
        currently_due: list | None = None,
        past_due: list | None = None,
        disabled_reason: str | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "account",
                "charges_enabled": charges_enabled,
                "payouts_enabled": payouts_enabled,
                "details_submitted": details_submitted,
                "country": "IN",
                "email": "provider@example.com",
                "requirements": {
                    "currently_due": currently_due or [],
                    "eventually_due": [],
                    "past_due": past_due or [],
                    "disabled_reason": disabled_reason,
                },
            }
        )

    return _create


@pytest.fixture
def mock_payment_intent():
    """Create a mock PaymentIntent response."""

    def _create(
        id: str = "pi_test123456",
        status: str = "requires_payment_method",
        amount: int = 3500000,
        currency: str = "inr",
        client_secret: str = "pi_test123456_secret_abc123",
        latest_charge: str | dict | None = None,
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "payment_intent",
                "status": status,
                "amount": amount,
                "currency": currency,
                "client_secret": client_secret,
                "latest_charge": latest_charge,
                "metadata": metadata or {},
            }
        )

    return _create


@pytest.fixture
def mock_payout():
    """Create a mock Payout response."""

    def _create(
        id: str = "po_test123456",
        status: str = "pending",
        amount: int = 500000,
        currency: str = "inr",
        method: str = "standard",
        arrival_date: int = 1767225600,  # 2026-01-01 UTC
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "payout",
                "status": status,
                "amount": amount,
                "currency": currency,
                "method": method,
                "arrival_date": arrival_date,
                "description": None,
                "failure_code": None,
                "failure_message": None,
                "metadata": {},
            }
        )

    return _create


@pytest.fixture
def mock_balance():
    """Create a mock Balance response."""

    def _create(available: int = 1000000, pending: int = 250000) -> MockStripeObject:
        return MockStripeObject(
            {
                "object": "balance",
                "available": [{"amount": available, "currency": "inr"}],
                "pending": [{"amount": pending, "currency": "inr"}],
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(
            message=message,
            param=None,
            code=code,
        )
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "Invalid payment intent ID",
        param: str | None = "payment_intent",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(
            message=message,
            param=param,
            code=code,
        )

    return _create


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(
        message="Too many requests hit the API too quickly.",
    )


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError(
        message="Could not connect to Stripe.",
    )


@pytest.fixture
def timeout_error():
    """Create the APIConnectionError Stripe raises when a request times out."""
    return stripe.APIConnectionError(
        message="Request to Stripe timed out.",
    )


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(
        message="Something went wrong on Stripe's end.",
    )


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(
        message="Invalid API Key provided.",
    )


@pytest.fixture
def signature_verification_error():
    """Create a Stripe SignatureVerificationError."""
    return stripe.SignatureVerificationError(
        message="Unable to verify webhook signature.",
        sig_header="bad_signature",
    )


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def mock_stripe_http_client():
    """Keep the adapter from building a real HTTP client."""
    with patch("payments.adapters.stripe_adapter.stripe.RequestsClient") as mock, patch.object(
        StripeAdapter, "_http_client", None
    ):
        yield mock


@pytest.fixture
def mock_stripe_account(mock_account):
    """Mock stripe.Account and stripe.AccountLink APIs."""
    with patch("stripe.Account") as account, patch("stripe.AccountLink") as link:
        account.create.return_value = mock_account()
        account.retrieve.return_value = mock_account(charges_enabled=True, payouts_enabled=True)
        link.create.return_value = MockStripeObject(
            {"object": "account_link", "url": "https://connect.stripe.com/setup/e/acct_test123"}
        )
        account.link = link
        yield account


@pytest.fixture
def mock_stripe_payment_intent(mock_payment_intent):
    """Mock stripe.PaymentIntent API."""
    with patch("stripe.PaymentIntent") as mock:
        mock.create.return_value = mock_payment_intent()
        mock.retrieve.return_value = mock_payment_intent(status="succeeded", latest_charge="ch_1")
        yield mock


@pytest.fixture
def mock_stripe_payout(mock_payout):
    """Mock stripe.Payout API."""
    with patch("stripe.Payout") as mock:
        mock.create.return_value = mock_payout()
        yield mock


@pytest.fixture
def mock_stripe_balance(mock_balance):
    """Mock stripe.Balance API."""
    with patch("stripe.Balance") as mock:
        mock.retrieve.return_value = mock_balance()
        yield mock


@pytest.fixture
def mock_stripe_webhook():
    """Mock stripe.Webhook API."""
    with patch("stripe.Webhook") as mock:
        mock.construct_event.return_value = MockStripeObject(
            {
                "id": "evt_test123",
                "type": "payment_intent.succeeded",
                "data": {
                    "object": {
                        "id": "pi_test123",
                        "object": "payment_intent",
                    }
                },
            }
        )
        yield mock
