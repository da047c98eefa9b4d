"""
Payment adapters for external services.

All payment processor calls go through StripeAdapter so error handling,
timeouts, idempotency and logging stay consistent.

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    result = StripeAdapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount=35000,
            currency="inr",
            destination_account_id="acct_123",
            application_fee_amount=1050,
            idempotency_key="create_intent:booking_123:1:a1b2c3d4",
        )
    )
"""

from payments.adapters.stripe_adapter import (
    AccountSnapshot,
    BalanceResult,
    BalanceTransactionResult,
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    PayoutResult,
    StripeAdapter,
    StripeListPage,
    TransferSnapshot,
    as_dict,
    from_minor_units,
    to_minor_units,
)

__all__ = [
    "AccountSnapshot",
    "BalanceResult",
    "BalanceTransactionResult",
    "CreatePaymentIntentParams",
    "IdempotencyKeyGenerator",
    "PaymentIntentResult",
    "PayoutResult",
    "StripeAdapter",
    "StripeListPage",
    "TransferSnapshot",
    "as_dict",
    "from_minor_units",
    "to_minor_units",
]
