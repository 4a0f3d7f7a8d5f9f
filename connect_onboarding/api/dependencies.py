"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, HTTPException, Request
from connect_onboarding.config import Settings
from connect_onboarding.domain.models import SessionContext
from connect_onboarding.infrastructure.clients.payments import PaymentsGateway, StripeGateway

SESSION_USER_KEY = "user"


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings(request: Request) -> Settings:
    """Settings the application was created with"""
    return request.app.state.settings


def get_payments_gateway(app_settings: Settings = Depends(get_settings)) -> PaymentsGateway:
    """Provide Stripe gateway instance"""
    return StripeGateway(app_settings)


def get_session_context(request: Request) -> SessionContext:
    """Read the signed-in user's context from the session cookie"""
    data = request.session.get(SESSION_USER_KEY)
    if not data:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return SessionContext.from_session(data)
    except (KeyError, TypeError, ValueError):
        request.session.pop(SESSION_USER_KEY, None)
        raise HTTPException(status_code=401, detail="Invalid session")
