"""
Payout service for provider withdrawals from their connected account.

The eligibility check reads the live available balance from Stripe, never
the mirror: payout eligibility is safety-critical and must be current.

A request either fully succeeds (one Stripe payout, one local row) or fails
with no local state written:
1. Validate amount and method (no remote call)
2. Check the connected account has payouts enabled
3. Read the live balance; refuse amounts above the available balance
4. Create the payout at Stripe
5. Record the Payout row keyed by Stripe's payout id

Usage:
    from payments.services import PayoutService

    result = PayoutService.request_payout(provider, Decimal("5000"), "standard")

    if result.success:
        payout = result.data
    elif result.error_code == "INSUFFICIENT_BALANCE":
        show(result.error)  # "Insufficient balance. Available: 4,000.00 INR"
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.exceptions import BaseApplicationError
from core.services import BaseService, ServiceResult
from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.exceptions import (
    InsufficientBalanceError,
    PaymentValidationError,
    PayoutsNotEnabledError,
    ProcessorError,
)
from payments.models import ConnectedAccount, Payout
from payments.state_machines import PayoutMethod, PayoutOrigin

if TYPE_CHECKING:
    from authentication.models import User


PAYOUTS_NOT_ENABLED_MESSAGE = "Stripe account not found or payouts not enabled"


@dataclass
class PayoutEligibility:
    """
    Whether a provider can request a payout right now.

    Balances are live Stripe figures in currency units.
    """

    has_account: bool
    charges_enabled: bool = False
    payouts_enabled: bool = False
    account_status: str | None = None
    available: Decimal = Decimal("0.00")
    pending: Decimal = Decimal("0.00")
    currency: str = "inr"

    @property
    def can_request_payout(self) -> bool:
        return self.payouts_enabled and self.available > 0


class PayoutService(BaseService):
    """
    Validates and submits provider payout requests.

    All methods are class methods - no instance state is maintained.
    No lock is held across the Stripe calls.
    """

    @classmethod
    def request_payout(
        cls,
        provider: User,
        amount: Decimal | int | str,
        method: str = PayoutMethod.STANDARD,
    ) -> ServiceResult[Payout]:
        """
        Pay out part of a provider's available balance.

        Args:
            provider: Provider requesting the payout
            amount: Amount in currency units (> 0, at most 2 decimals)
            method: "standard" or "instant"

        Returns:
            ServiceResult containing the Payout row. Failures carry
            PAYMENT_VALIDATION_ERROR, PAYOUTS_NOT_ENABLED,
            INSUFFICIENT_BALANCE or a processor error code.
        """
        logger = cls.get_logger()
        extra = {"provider_id": provider.pk, "method": method}

        try:
            amount = cls._validate(amount, method)
            extra["amount"] = str(amount)
            account = cls._payout_account(provider)

            balance = StripeAdapter.retrieve_balance(account.stripe_account_id)
            if amount > balance.available:
                raise InsufficientBalanceError(
                    f"Insufficient balance. Available: "
                    f"{balance.available:,.2f} {settings.PAYMENT_CURRENCY.upper()}",
                    details={
                        "available": str(balance.available),
                        "requested": str(amount),
                    },
                )

            result = StripeAdapter.create_payout(
                account_id=account.stripe_account_id,
                amount=amount,
                currency=settings.PAYMENT_CURRENCY,
                method=method,
                # Same amount and method within a minute is treated as a double submit
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "payout",
                    provider.pk,
                    attempt=f"{amount}:{method}:{timezone.now():%Y%m%d%H%M}",
                ),
                metadata={
                    "providerId": str(provider.pk),
                    "requestedBy": provider.name or provider.email,
                },
                description=f"Payout to {provider.name or provider.email}",
            )
        except ProcessorError as exc:
            logger.error(
                "Stripe rejected payout request",
                extra={**extra, "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)
        except BaseApplicationError as exc:
            logger.info(
                "Payout request refused",
                extra={**extra, "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)

        # payout.created may have beaten us here; the row is keyed by Stripe's id
        payout, created = Payout.objects.get_or_create(
            stripe_payout_id=result.id,
            defaults={
                "provider": provider,
                "stripe_account_id": account.stripe_account_id,
                "amount": result.amount,
                "currency": result.currency or settings.PAYMENT_CURRENCY,
                "method": method,
                "status": result.status,
                "origin": PayoutOrigin.REQUESTED,
                "description": result.description or f"Payout to {provider.name or provider.email}",
                "arrival_date": result.arrival_date,
                "metadata": result.metadata,
            },
        )
        if not created:
            payout.apply_result(result)
            payout.save()

        logger.info(
            "Payout requested",
            extra={**extra, "payout_id": result.id, "status": payout.status},
        )
        return ServiceResult.success(payout)

    @classmethod
    def get_payout_eligibility(cls, provider: User) -> ServiceResult[PayoutEligibility]:
        """
        Account presence, payout flag and live balance for a provider.

        Returns:
            ServiceResult containing PayoutEligibility; has_account is False
            (and no Stripe call is made) when the provider never onboarded.
        """
        account = ConnectedAccount.objects.filter(provider=provider).first()
        if account is None:
            return ServiceResult.success(
                PayoutEligibility(has_account=False, currency=settings.PAYMENT_CURRENCY)
            )

        try:
            balance = StripeAdapter.retrieve_balance(account.stripe_account_id)
        except ProcessorError as exc:
            cls.get_logger().error(
                "Could not read provider balance",
                extra={
                    "provider_id": provider.pk,
                    "stripe_account_id": account.stripe_account_id,
                },
            )
            return ServiceResult.from_exception(exc)

        return ServiceResult.success(
            PayoutEligibility(
                has_account=True,
                charges_enabled=account.charges_enabled,
                payouts_enabled=account.payouts_enabled,
                account_status=account.status,
                available=balance.available,
                pending=balance.pending,
                currency=balance.currency or settings.PAYMENT_CURRENCY,
            )
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _validate(amount: Decimal | int | str, method: str) -> Decimal:
        try:
            amount = Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise PaymentValidationError("Invalid payout amount") from exc

        if not amount.is_finite() or amount <= 0:
            raise PaymentValidationError("Invalid payout amount")
        if amount != amount.quantize(Decimal("0.01")):
            raise PaymentValidationError("Payout amount cannot have more than 2 decimal places")
        if method not in PayoutMethod.values:
            raise PaymentValidationError(
                f"Invalid payout method: {method}",
                details={"allowed": list(PayoutMethod.values)},
            )
        return amount

    @staticmethod
    def _payout_account(provider: User) -> ConnectedAccount:
        account = ConnectedAccount.objects.filter(provider=provider).first()
        if account is None or not account.payouts_enabled:
            raise PayoutsNotEnabledError(PAYOUTS_NOT_ENABLED_MESSAGE)
        return account
