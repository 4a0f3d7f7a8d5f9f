"""User registration: validate, create the connected account, persist the user"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from connect_onboarding.domain.accounts import build_account_create_params
from connect_onboarding.domain.exceptions import (
    ConfigurationError,
    ConflictError,
    PersistenceError,
    RemoteServiceError,
)
from connect_onboarding.domain.models import Platform, get_platform
from connect_onboarding.domain.validation import UserRegistration, validate
from connect_onboarding.infrastructure.clients.payments import PaymentsGateway
from connect_onboarding.infrastructure.database.models import User
from connect_onboarding.infrastructure.database.repositories import UserRepository
from connect_onboarding.infrastructure.observability.metrics import orphaned_account_counter
from connect_onboarding.infrastructure.security import hash_password

logger = logging.getLogger(__name__)

ACCOUNT_EXISTS_MESSAGE = "Account already exists"


class RegistrationService:
    """Registers a user against a freshly created connected account"""

    def __init__(self, gateway: PaymentsGateway, users: UserRepository, demo_mode: bool):
        self.gateway = gateway
        self.users = users
        self.demo_mode = demo_mode

    async def register(self, payload: Optional[Mapping[str, Any]]) -> User:
        """
        Register a new user.

        Flow:
        1. Validate email, password and country
        2. Reject emails that are already registered
        3. Create the connected account on the country's platform
        4. Hash the password and persist the user

        The remote account is created before the local row. If the row cannot
        be written the account is deleted again so no orphan is left behind.

        Raises:
            ValidationError: Payload is invalid
            ConflictError: Email already registered
            RemoteServiceError: Stripe rejected the account creation
            PersistenceError: The user row could not be written
        """
        registration = validate(UserRegistration, payload)

        if self.users.get_by_email(registration.email) is not None:
            raise ConflictError(ACCOUNT_EXISTS_MESSAGE)

        platform = get_platform(registration.country)
        account = await self.gateway.create_account(
            platform,
            build_account_create_params(registration.email, registration.country, self.demo_mode),
        )

        # bcrypt is CPU-bound; keep it off the event loop
        hashed_password = await run_in_threadpool(hash_password, registration.password)

        try:
            user = self.users.create_user(
                email=registration.email,
                hashed_password=hashed_password,
                account_id=account.id,
                country=registration.country,
            )
            self.users.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            self.users.rollback()
            await self._compensate(platform, account.id)
            raise ConflictError(ACCOUNT_EXISTS_MESSAGE) from e
        except SQLAlchemyError as e:
            self.users.rollback()
            compensated = await self._compensate(platform, account.id)
            raise PersistenceError(
                f"Failed to persist user for account {account.id}: {e}",
                orphaned_account_id=None if compensated else account.id,
            ) from e

        return user

    async def _compensate(self, platform: Platform, account_id: str) -> bool:
        """Delete a connected account that has no local user. Returns False if it is left orphaned."""
        try:
            await self.gateway.delete_account(platform, account_id)
        except (RemoteServiceError, ConfigurationError) as e:
            orphaned_account_counter.inc()
            logger.error(
                f"Connected account {account_id} is orphaned: {e}",
                extra={"account_id": account_id, "platform": platform.value},
            )
            return False
        logger.warning(
            f"Deleted connected account {account_id} after failed user insert",
            extra={"account_id": account_id, "platform": platform.value},
        )
        return True
