"""Unit tests for the registration flow"""

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import OperationalError
from starlette.concurrency import run_in_threadpool
from connect_onboarding.domain.exceptions import (
    ConflictError,
    PersistenceError,
    RemoteServiceError,
    ValidationError,
)
from connect_onboarding.domain.models import Platform
from connect_onboarding.infrastructure.database.models import User
from connect_onboarding.infrastructure.database.repositories import UserRepository
from connect_onboarding.infrastructure.security import hash_password, verify_password
from connect_onboarding.services.registration import RegistrationService

PAYLOAD = {"email": "jenny.rosen@example.com", "password": "Passw0rdOk", "country": "US"}


@pytest.fixture
def service(db, gateway):
    return RegistrationService(gateway, UserRepository(db), demo_mode=False)


async def test_register_creates_account_and_user(service, gateway, db):
    user = await service.register(PAYLOAD)

    assert len(gateway.created) == 1
    platform, params = gateway.created[0]
    assert platform == Platform.US
    assert params["type"] == "custom"
    assert "individual" not in params

    rows = db.query(User).all()
    assert len(rows) == 1
    assert rows[0].account_id == user.account_id == "acct_test_1"
    assert rows[0].country == "US"


async def test_register_hashes_password(service, db):
    await service.register(PAYLOAD)

    stored = db.query(User).one()
    assert stored.password != PAYLOAD["password"]
    assert verify_password(PAYLOAD["password"], stored.password)


async def test_register_hashes_password_in_threadpool(service, db):
    """bcrypt runs in a worker thread and the hash is still stored"""
    with patch("connect_onboarding.services.registration.run_in_threadpool", wraps=run_in_threadpool) as spy:
        await service.register(PAYLOAD)

    spy.assert_called_once_with(hash_password, PAYLOAD["password"])
    assert verify_password(PAYLOAD["password"], db.query(User).one().password)


async def test_register_uses_uk_platform_for_gb(service, gateway):
    await service.register({**PAYLOAD, "country": "GB"})

    assert gateway.created[0][0] == Platform.UK


async def test_register_in_demo_mode_injects_tax_id(db, gateway):
    service = RegistrationService(gateway, UserRepository(db), demo_mode=True)

    await service.register(PAYLOAD)

    params = gateway.created[0][1]
    assert params["business_type"] == "individual"
    assert params["individual"] == {"id_number": "000000000"}


async def test_duplicate_registration_is_rejected_without_side_effects(service, gateway, db):
    await service.register(PAYLOAD)

    with pytest.raises(ConflictError, match="Account already exists"):
        await service.register(PAYLOAD)

    assert len(gateway.created) == 1
    assert db.query(User).count() == 1


async def test_invalid_payload_makes_no_remote_call(service, gateway, db):
    with pytest.raises(ValidationError):
        await service.register({**PAYLOAD, "password": "abcdefgh"})

    assert gateway.created == []
    assert db.query(User).count() == 0


async def test_remote_failure_leaves_no_user(service, gateway, db):
    gateway.create_account = AsyncMock(side_effect=RemoteServiceError("create_account", "card_issuing unavailable"))

    with pytest.raises(RemoteServiceError):
        await service.register(PAYLOAD)

    assert db.query(User).count() == 0


async def test_persistence_failure_deletes_remote_account(service, gateway, db):
    with patch.object(
        UserRepository,
        "create_user",
        side_effect=OperationalError("INSERT INTO app_user", {}, Exception("disk I/O error")),
    ):
        with pytest.raises(PersistenceError) as exc_info:
            await service.register(PAYLOAD)

    assert gateway.deleted == [(Platform.US, "acct_test_1")]
    assert exc_info.value.orphaned_account_id is None
    assert db.query(User).count() == 0


async def test_failed_compensation_reports_orphaned_account(service, gateway):
    gateway.delete_account = AsyncMock(side_effect=RemoteServiceError("delete_account", "rate limited"))

    with patch.object(
        UserRepository,
        "create_user",
        side_effect=OperationalError("INSERT INTO app_user", {}, Exception("disk I/O error")),
    ):
        with pytest.raises(PersistenceError) as exc_info:
            await service.register(PAYLOAD)

    assert exc_info.value.orphaned_account_id == "acct_test_1"


async def test_concurrent_duplicate_is_a_conflict(service, gateway, db):
    """Unique constraint hit after the existence check still compensates"""
    with patch.object(UserRepository, "get_by_email", return_value=None):
        await service.register(PAYLOAD)
        with pytest.raises(ConflictError):
            await service.register(PAYLOAD)

    assert len(gateway.created) == 2
    assert gateway.deleted == [(Platform.US, "acct_test_2")]
    assert db.query(User).count() == 1
