"""
Pytest fixtures for payment tests.

This module provides the users, listing and connected account most payment
tests start from, and a patched StripeAdapter so tests never talk to Stripe.
Builders for adapter results and webhook payloads live in factories.py.

Usage:
    def test_checkout(seeker, listing, provider_account, mock_stripe):
        mock_stripe.create_payment_intent.return_value = intent_result()
        ...
"""

from contextlib import ExitStack
from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import ProviderFactory, SeekerFactory
from listings.tests.factories import ListingFactory
from payments.tests.factories import ConnectedAccountFactory

# Every module that binds StripeAdapter at import time
STRIPE_ADAPTER_TARGETS = [
    "payments.services.payment_orchestrator.StripeAdapter",
    "payments.services.payout_service.StripeAdapter",
    "payments.services.connected_account_service.StripeAdapter",
    "payments.tasks.StripeAdapter",
    "payments.webhooks.views.StripeAdapter",
]


# =============================================================================
# Users, Listing and Account
# =============================================================================


@pytest.fixture
def provider(db):
    return ProviderFactory(name="Asha Rao")


@pytest.fixture
def seeker(db):
    return SeekerFactory()


@pytest.fixture
def listing(provider):
    """35000 INR for a 3-month stay: 3 x 10000 rent + 5000 deposit."""
    return ListingFactory(provider=provider, monthly_rent=10000, security_deposit=5000)


@pytest.fixture
def provider_account(provider):
    """Enabled connected account for the listing's provider."""
    return ConnectedAccountFactory(provider=provider, stripe_account_id="acct_provider")


@pytest.fixture
def api_client():
    return APIClient()


# =============================================================================
# Stripe Adapter Mock
# =============================================================================


@pytest.fixture
def mock_stripe():
    """One MagicMock standing in for StripeAdapter in every caller."""
    adapter = MagicMock(name="StripeAdapter")
    with ExitStack() as stack:
        for target in STRIPE_ADAPTER_TARGETS:
            stack.enter_context(patch(target, adapter))
        yield adapter
