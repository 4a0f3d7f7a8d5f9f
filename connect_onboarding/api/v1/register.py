"""POST /api/register - create a user and their connected account"""

import time
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from connect_onboarding.api.dependencies import (
    SESSION_USER_KEY,
    get_payments_gateway,
    get_request_id,
    get_settings,
)
from connect_onboarding.api.v1.schemas import INTERNAL_ERROR_MESSAGE, error_response, success_response
from connect_onboarding.config import Settings
from connect_onboarding.domain.exceptions import ConflictError, DomainException, PersistenceError, ValidationError
from connect_onboarding.domain.models import SessionContext, StripeAccountRef, get_platform
from connect_onboarding.infrastructure.clients.payments import PaymentsGateway
from connect_onboarding.infrastructure.database.repositories import UserRepository
from connect_onboarding.infrastructure.database.session import get_db
from connect_onboarding.infrastructure.observability.logging import log_registration
from connect_onboarding.infrastructure.observability.metrics import record_registration
from connect_onboarding.services.registration import RegistrationService

router = APIRouter()


@router.post("/register")
async def register(
    request: Request,
    payload: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    gateway: PaymentsGateway = Depends(get_payments_gateway),
    app_settings: Settings = Depends(get_settings),
):
    """
    Register a user.

    Flow:
    1. Validate email, password and country
    2. Reject duplicate emails
    3. Create the connected account on Stripe
    4. Persist the user and sign them in
    """
    start_time = time.time()
    request_id = get_request_id(request)
    service = RegistrationService(gateway, UserRepository(db), demo_mode=app_settings.demo_mode)

    try:
        user = await service.register(payload)

    except ValidationError as e:
        record_registration("invalid")
        logging.info(f"Registration rejected: {e}", extra={"request_id": request_id})
        return error_response(e.status_code, str(e))

    except ConflictError as e:
        record_registration("conflict")
        logging.info("Registration rejected: account exists", extra={"request_id": request_id})
        return error_response(e.status_code, str(e))

    except PersistenceError as e:
        record_registration("failed")
        logging.error(
            f"Registration persistence error: {e}",
            extra={"request_id": request_id, "orphaned_account_id": e.orphaned_account_id},
        )
        return error_response(e.status_code, INTERNAL_ERROR_MESSAGE)

    except DomainException as e:
        record_registration("failed")
        logging.error(f"Registration failed: {e}", extra={"request_id": request_id})
        return error_response(e.status_code, INTERNAL_ERROR_MESSAGE)

    except Exception as e:
        db.rollback()
        record_registration("failed")
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        return error_response(500, INTERNAL_ERROR_MESSAGE)

    context = SessionContext(
        email=user.email,
        country=user.country,
        financial_product=app_settings.financial_product,
        stripe_account=StripeAccountRef(account_id=user.account_id, platform=get_platform(user.country)),
    )
    request.session[SESSION_USER_KEY] = context.to_session()

    duration_ms = (time.time() - start_time) * 1000
    record_registration("created")
    log_registration(request_id, user.account_id, user.country, duration_ms)

    return success_response()
