"""
Connected account service: provider onboarding, refresh reads and
Stripe-side listings for the account.

Usage:
    from payments.services import ConnectedAccountService

    result = ConnectedAccountService.start_onboarding(provider)
    if result.success:
        redirect(result.data.onboarding_url)

    # Provider returns from Stripe
    result = ConnectedAccountService.refresh_account(provider)

    # Stripe-side history, paged with next_cursor
    result = ConnectedAccountService.list_payouts(provider, limit=20)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService, ServiceResult
from payments.adapters import (
    BalanceTransactionResult,
    IdempotencyKeyGenerator,
    PayoutResult,
    StripeAdapter,
    StripeListPage,
)
from payments.exceptions import ProcessorError
from payments.models import ConnectedAccount

if TYPE_CHECKING:
    from authentication.models import User


@dataclass
class OnboardingLink:
    account: ConnectedAccount
    onboarding_url: str


class ConnectedAccountService(BaseService):
    """
    Creates and refreshes providers' Express accounts.

    The mirror row is written once at onboarding; afterwards only
    account.updated events and refresh reads overwrite it.
    """

    @classmethod
    def start_onboarding(
        cls,
        provider: User,
        refresh_url: str | None = None,
        return_url: str | None = None,
    ) -> ServiceResult[OnboardingLink]:
        """
        Create the provider's connected account if needed and return a link.

        A provider that already has an account gets a fresh onboarding link
        for it; account links expire, so a new one is issued on every call.

        Args:
            provider: Provider user
            refresh_url: Where Stripe sends the provider if the link expired
            return_url: Where Stripe sends the provider after the form

        Returns:
            ServiceResult containing OnboardingLink
        """
        logger = cls.get_logger()
        extra = {"provider_id": provider.pk}

        try:
            account = ConnectedAccount.objects.filter(provider=provider).first()
            if account is None:
                snapshot = StripeAdapter.create_connected_account(
                    provider_id=provider.pk,
                    email=provider.email,
                    country=settings.CONNECTED_ACCOUNT_COUNTRY,
                    idempotency_key=IdempotencyKeyGenerator.generate(
                        "connect_account", provider.pk
                    ),
                )
                # Concurrent onboarding gets the same account back from Stripe
                account, created = ConnectedAccount.objects.get_or_create(
                    provider=provider,
                    defaults={"stripe_account_id": snapshot.id},
                )
                if created:
                    account.apply_snapshot(snapshot)
                    account.save()
                    logger.info(
                        "Connected account created",
                        extra={**extra, "stripe_account_id": snapshot.id},
                    )

            url = StripeAdapter.create_account_link(
                account.stripe_account_id,
                refresh_url or settings.CONNECT_ONBOARDING_REFRESH_URL,
                return_url or settings.CONNECT_ONBOARDING_RETURN_URL,
            )
        except ProcessorError as exc:
            logger.error(
                "Could not start provider onboarding",
                extra={**extra, "error_code": exc.error_code},
            )
            return ServiceResult.from_exception(exc)

        return ServiceResult.success(OnboardingLink(account=account, onboarding_url=url))

    @classmethod
    def refresh_account(cls, provider: User) -> ServiceResult[ConnectedAccount | None]:
        """
        Re-read the provider's account from Stripe and overwrite the mirror.

        Returns:
            ServiceResult containing the refreshed account, or None when the
            provider has not started onboarding.
        """
        account = ConnectedAccount.objects.filter(provider=provider).first()
        if account is None:
            return ServiceResult.success(None)

        try:
            cls.sync_account(account)
        except ProcessorError as exc:
            cls.get_logger().error(
                "Could not refresh connected account",
                extra={
                    "provider_id": provider.pk,
                    "stripe_account_id": account.stripe_account_id,
                },
            )
            return ServiceResult.from_exception(exc)

        return ServiceResult.success(account)

    @classmethod
    def sync_account(cls, account: ConnectedAccount) -> ConnectedAccount:
        """
        Overwrite one mirror row from Stripe.

        Raises:
            ProcessorError: Stripe could not be read
        """
        snapshot = StripeAdapter.retrieve_account(account.stripe_account_id)
        account.apply_snapshot(snapshot)
        account.save()
        cls.get_logger().info(
            "Connected account refreshed",
            extra={
                "stripe_account_id": account.stripe_account_id,
                "status": account.status,
            },
        )
        return account

    # ==========================================================================
    # Stripe-side Listings
    # ==========================================================================

    @classmethod
    def list_balance_transactions(
        cls,
        provider: User,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> ServiceResult[StripeListPage[BalanceTransactionResult]]:
        """
        Balance history of the provider's account as Stripe reports it.

        Returns:
            ServiceResult containing a StripeListPage; the page is empty when
            the provider has not started onboarding.
        """
        return cls._list_for_provider(
            provider, "list_balance_transactions", limit, starting_after
        )

    @classmethod
    def list_payouts(
        cls,
        provider: User,
        limit: int = 20,
        starting_after: str | None = None,
    ) -> ServiceResult[StripeListPage[PayoutResult]]:
        """Payouts of the provider's account as Stripe reports them."""
        return cls._list_for_provider(provider, "list_payouts", limit, starting_after)

    @classmethod
    def _list_for_provider(
        cls,
        provider: User,
        operation: str,
        limit: int,
        starting_after: str | None,
    ) -> ServiceResult[StripeListPage]:
        account = ConnectedAccount.objects.filter(provider=provider).first()
        if account is None:
            return ServiceResult.success(StripeListPage(items=[]))

        try:
            page = getattr(StripeAdapter, operation)(
                account.stripe_account_id,
                limit=limit,
                starting_after=starting_after,
            )
        except ProcessorError as exc:
            cls.get_logger().error(
                "Could not list Stripe activity",
                extra={
                    "provider_id": provider.pk,
                    "stripe_account_id": account.stripe_account_id,
                    "operation": operation,
                    "error_code": exc.error_code,
                },
            )
            return ServiceResult.from_exception(exc)

        return ServiceResult.success(page)
