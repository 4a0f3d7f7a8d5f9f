"""Business onboarding: update the connected account and hand out the next redirect"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from connect_onboarding.domain.accounts import build_account_update_params, outstanding_requirements
from connect_onboarding.domain.exceptions import ConfigurationError
from connect_onboarding.domain.models import SessionContext, StripeAccountRef
from connect_onboarding.domain.validation import onboarding_schema, validate
from connect_onboarding.infrastructure.clients.payments import PaymentsGateway

SKIP_REDIRECT_URL = "/"


@dataclass
class OnboardingResult:
    redirect_url: str
    skipped: bool


class OnboardingService:
    """Submits business details and decides where the user goes next"""

    def __init__(self, gateway: PaymentsGateway, demo_mode: bool, redirect_base_url: Optional[str]):
        self.gateway = gateway
        self.demo_mode = demo_mode
        self.redirect_base_url = redirect_base_url

    async def onboard(self, context: SessionContext, payload: Optional[Mapping[str, Any]]) -> OnboardingResult:
        """
        Update the connected account with the submitted business details.

        In demo mode synthetic KYC data is sent along, and a requested skip
        returns the application root instead of a hosted onboarding link.

        Raises:
            ValidationError: Payload is invalid for the current mode
            RemoteServiceError: Stripe rejected the update or link creation
            ConfigurationError: Redirect base URL is missing
        """
        details = validate(onboarding_schema(self.demo_mode), payload)
        skip = self.demo_mode and details.skip_requested

        params = build_account_update_params(
            business_name=details.business_name,
            email=context.email,
            country=context.country,
            financial_product=context.financial_product,
            demo_mode=self.demo_mode,
            skip_onboarding=skip,
        )
        await self.gateway.update_account(context.platform, context.account_id, params)

        if skip:
            return OnboardingResult(redirect_url=SKIP_REDIRECT_URL, skipped=True)

        url = await self.create_onboarding_url(context.stripe_account)
        return OnboardingResult(redirect_url=url, skipped=False)

    async def create_onboarding_url(self, account: StripeAccountRef) -> str:
        """Create a hosted onboarding link that returns to this application"""
        if not self.redirect_base_url:
            raise ConfigurationError("CONNECT_ONBOARDING_REDIRECT_URL is not set")

        base_url = self.redirect_base_url.rstrip("/")
        return await self.gateway.create_onboarding_link(
            account.platform,
            account.account_id,
            refresh_url=f"{base_url}/onboard",
            return_url=f"{base_url}/",
        )

    async def has_outstanding_requirements(self, account: StripeAccountRef) -> bool:
        """True if the account still has currently-due requirements besides ignored ones"""
        remote_account = await self.gateway.retrieve_account(account.platform, account.account_id)
        return len(outstanding_requirements(remote_account)) > 0
