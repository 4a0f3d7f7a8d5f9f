"""Stripe Connect client for connected-account lifecycle calls"""

import abc
import logging
from typing import Any, Dict, Optional

import stripe

from connect_onboarding.config import Settings, settings as default_settings
from connect_onboarding.domain.exceptions import ConfigurationError, RemoteServiceError
from connect_onboarding.domain.models import ConnectedAccount, Platform
from connect_onboarding.infrastructure.observability.metrics import stripe_failure_counter

logger = logging.getLogger(__name__)


class PaymentsGateway(abc.ABC):
    """Operations this service needs from the payments provider"""

    @abc.abstractmethod
    async def create_account(self, platform: Platform, params: Dict[str, Any]) -> ConnectedAccount:
        ...

    @abc.abstractmethod
    async def update_account(self, platform: Platform, account_id: str, params: Dict[str, Any]) -> ConnectedAccount:
        ...

    @abc.abstractmethod
    async def create_onboarding_link(
        self,
        platform: Platform,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> str:
        ...

    @abc.abstractmethod
    async def retrieve_account(self, platform: Platform, account_id: str) -> ConnectedAccount:
        ...

    @abc.abstractmethod
    async def delete_account(self, platform: Platform, account_id: str) -> None:
        ...


def to_connected_account(account: Any) -> ConnectedAccount:
    """Extract the fields we read from a Stripe Account object"""
    requirements = getattr(account, "requirements", None)
    currently_due = getattr(requirements, "currently_due", None) if requirements else None
    return ConnectedAccount(
        id=account.id,
        country=getattr(account, "country", None),
        currently_due=tuple(currently_due or ()),
    )


class StripeGateway(PaymentsGateway):
    """
    Stripe implementation of the payments gateway.

    Each platform is a separate Stripe account with its own secret key; the
    key is passed per call so both platforms can be served by one process.
    Calls are not retried.
    """

    def __init__(self, app_settings: Optional[Settings] = None):
        app_settings = app_settings or default_settings
        self.api_keys = {
            Platform.US: app_settings.stripe_secret_key_us,
            Platform.UK: app_settings.stripe_secret_key_uk,
        }

    def api_key(self, platform: Platform) -> str:
        """
        Raises:
            ConfigurationError: If no key is configured for the platform
        """
        key = self.api_keys.get(platform)
        if not key:
            raise ConfigurationError(f"Stripe secret key for platform {platform.value} is not set")
        return key

    def _failure(self, operation: str, error: stripe.StripeError) -> RemoteServiceError:
        stripe_failure_counter.labels(operation=operation).inc()
        logger.error(
            f"Stripe {operation} failed: {error}",
            extra={"operation": operation, "stripe_request_id": getattr(error, "request_id", None)},
        )
        return RemoteServiceError(operation, str(error))

    async def create_account(self, platform: Platform, params: Dict[str, Any]) -> ConnectedAccount:
        try:
            account = await stripe.Account.create_async(api_key=self.api_key(platform), **params)
        except stripe.StripeError as e:
            raise self._failure("create_account", e) from e
        logger.info(f"Created connected account {account.id}", extra={"platform": platform.value})
        return to_connected_account(account)

    async def update_account(self, platform: Platform, account_id: str, params: Dict[str, Any]) -> ConnectedAccount:
        try:
            account = await stripe.Account.modify_async(account_id, api_key=self.api_key(platform), **params)
        except stripe.StripeError as e:
            raise self._failure("update_account", e) from e
        return to_connected_account(account)

    async def create_onboarding_link(
        self,
        platform: Platform,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> str:
        try:
            account_link = await stripe.AccountLink.create_async(
                api_key=self.api_key(platform),
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )
        except stripe.StripeError as e:
            raise self._failure("create_onboarding_link", e) from e
        return account_link.url

    async def retrieve_account(self, platform: Platform, account_id: str) -> ConnectedAccount:
        try:
            account = await stripe.Account.retrieve_async(account_id, api_key=self.api_key(platform))
        except stripe.StripeError as e:
            raise self._failure("retrieve_account", e) from e
        return to_connected_account(account)

    async def delete_account(self, platform: Platform, account_id: str) -> None:
        try:
            await stripe.Account.delete_async(account_id, api_key=self.api_key(platform))
        except stripe.StripeError as e:
            raise self._failure("delete_account", e) from e
        logger.info(f"Deleted connected account {account_id}", extra={"platform": platform.value})
