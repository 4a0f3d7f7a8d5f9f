"""Pytest fixtures for testing"""

import pytest
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from connect_onboarding.api.dependencies import get_payments_gateway, get_session_context
from connect_onboarding.api.main import create_app
from connect_onboarding.config import Settings
from connect_onboarding.domain.models import (
    ConnectedAccount,
    FinancialProduct,
    Platform,
    SessionContext,
    StripeAccountRef,
)
from connect_onboarding.infrastructure.clients.payments import PaymentsGateway
from connect_onboarding.infrastructure.database.models import Base
from connect_onboarding.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

REDIRECT_BASE_URL = "https://demo.example.com"


class FakePaymentsGateway(PaymentsGateway):
    """In-memory stand-in for Stripe that records every call"""

    def __init__(self):
        self.created: List[Tuple[Platform, Dict[str, Any]]] = []
        self.updated: List[Tuple[Platform, str, Dict[str, Any]]] = []
        self.links: List[Tuple[Platform, str, str, str]] = []
        self.deleted: List[Tuple[Platform, str]] = []
        self.currently_due: Dict[str, List[str]] = {}

    async def create_account(self, platform, params):
        self.created.append((platform, params))
        return ConnectedAccount(id=f"acct_test_{len(self.created)}", country=params.get("country"))

    async def update_account(self, platform, account_id, params):
        self.updated.append((platform, account_id, params))
        return ConnectedAccount(id=account_id)

    async def create_onboarding_link(self, platform, account_id, refresh_url, return_url):
        self.links.append((platform, account_id, refresh_url, return_url))
        return f"https://connect.stripe.com/setup/c/{account_id}"

    async def retrieve_account(self, platform, account_id):
        return ConnectedAccount(id=account_id, currently_due=tuple(self.currently_due.get(account_id, [])))

    async def delete_account(self, platform, account_id):
        self.deleted.append((platform, account_id))


def make_settings(demo_mode: bool = False, redirect_url: Optional[str] = REDIRECT_BASE_URL, **overrides) -> Settings:
    return Settings(
        _env_file=None,
        database_url=TEST_DATABASE_URL,
        demo_mode=demo_mode,
        connect_onboarding_redirect_url=redirect_url,
        stripe_secret_key_us="sk_test_us",
        stripe_secret_key_uk="sk_test_uk",
        session_secret_key="test-secret",
        **overrides,
    )


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway() -> FakePaymentsGateway:
    return FakePaymentsGateway()


@pytest.fixture
def session_context() -> SessionContext:
    """Signed-in user on the US platform"""
    return SessionContext(
        email="jenny.rosen@example.com",
        country="US",
        financial_product=FinancialProduct.EXPENSE_MANAGEMENT,
        stripe_account=StripeAccountRef(account_id="acct_existing", platform=Platform.US),
    )


@pytest.fixture
def make_client(db: Session, gateway: FakePaymentsGateway) -> Callable[..., TestClient]:
    """Build a test client for a given configuration.

    Pass ``context`` to bypass the session cookie with a fixed signed-in user.
    """

    def factory(context: Optional[SessionContext] = None, **settings_kwargs) -> TestClient:
        app = create_app(make_settings(**settings_kwargs))

        def override_get_db():
            try:
                yield db
            finally:
                pass

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_payments_gateway] = lambda: gateway
        if context is not None:
            app.dependency_overrides[get_session_context] = lambda: context
        return TestClient(app)

    return factory


@pytest.fixture
def client(make_client) -> TestClient:
    """Test client outside demo mode"""
    return make_client()


@pytest.fixture
def demo_client(make_client) -> TestClient:
    """Test client in demo mode"""
    return make_client(demo_mode=True)
