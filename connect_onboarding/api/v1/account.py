"""GET /api/account/requirements - check whether onboarding is still outstanding"""

import logging
from fastapi import APIRouter, Depends, Request

from connect_onboarding.api.dependencies import get_request_id, get_session_context
from connect_onboarding.api.v1.onboard import build_onboarding_service
from connect_onboarding.api.v1.schemas import (
    INTERNAL_ERROR_MESSAGE,
    RequirementsData,
    error_response,
    success_response,
)
from connect_onboarding.domain.exceptions import DomainException
from connect_onboarding.domain.models import SessionContext
from connect_onboarding.services.onboarding import OnboardingService

router = APIRouter()


@router.get("/account/requirements")
async def get_requirements(
    request: Request,
    context: SessionContext = Depends(get_session_context),
    service: OnboardingService = Depends(build_onboarding_service),
):
    """Report whether the connected account has currently-due requirements"""
    try:
        outstanding = await service.has_outstanding_requirements(context.stripe_account)
    except DomainException as e:
        logging.error(
            f"Requirements check failed: {e}",
            extra={"request_id": get_request_id(request), "account_id": context.account_id},
        )
        return error_response(e.status_code, INTERNAL_ERROR_MESSAGE)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        return error_response(500, INTERNAL_ERROR_MESSAGE)

    return success_response(RequirementsData(has_outstanding_requirements=outstanding))
