"""POST /api/onboard - submit business details and get the next redirect"""

import time
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Request

from connect_onboarding.api.dependencies import (
    get_payments_gateway,
    get_request_id,
    get_session_context,
    get_settings,
)
from connect_onboarding.api.v1.schemas import (
    INTERNAL_ERROR_MESSAGE,
    RedirectData,
    error_response,
    success_response,
)
from connect_onboarding.config import Settings
from connect_onboarding.domain.exceptions import DomainException, ValidationError
from connect_onboarding.domain.models import SessionContext
from connect_onboarding.infrastructure.clients.payments import PaymentsGateway
from connect_onboarding.infrastructure.observability.logging import log_onboarding
from connect_onboarding.infrastructure.observability.metrics import record_onboarding
from connect_onboarding.services.onboarding import OnboardingService

router = APIRouter()


def build_onboarding_service(
    gateway: PaymentsGateway = Depends(get_payments_gateway),
    app_settings: Settings = Depends(get_settings),
) -> OnboardingService:
    return OnboardingService(
        gateway,
        demo_mode=app_settings.demo_mode,
        redirect_base_url=app_settings.connect_onboarding_redirect_url,
    )


@router.post("/onboard")
async def onboard(
    request: Request,
    payload: Optional[Dict[str, Any]] = Body(None),
    context: SessionContext = Depends(get_session_context),
    service: OnboardingService = Depends(build_onboarding_service),
):
    """
    Update the signed-in user's connected account.

    Returns the hosted onboarding URL, or "/" when onboarding is skipped in
    demo mode.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = await service.onboard(context, payload)

    except ValidationError as e:
        record_onboarding("invalid")
        logging.info(f"Onboarding rejected: {e}", extra={"request_id": request_id})
        return error_response(e.status_code, str(e))

    except DomainException as e:
        record_onboarding("failed")
        logging.error(
            f"Onboarding failed: {e}",
            extra={"request_id": request_id, "account_id": context.account_id},
        )
        return error_response(e.status_code, INTERNAL_ERROR_MESSAGE)

    except Exception as e:
        record_onboarding("failed")
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        return error_response(500, INTERNAL_ERROR_MESSAGE)

    duration_ms = (time.time() - start_time) * 1000
    record_onboarding("skipped" if result.skipped else "hosted_link")
    log_onboarding(request_id, context.account_id, result.skipped, duration_ms)

    return success_response(RedirectData(redirect_url=result.redirect_url))
