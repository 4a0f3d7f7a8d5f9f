"""Pydantic schemas for the JSON response envelope"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorDetail(BaseModel):
    message: str


class ApiResponse(BaseModel):
    """Envelope shared by every /api endpoint"""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[ErrorDetail] = None


class RedirectData(BaseModel):
    """Payload of a successful POST /api/onboard"""

    redirect_url: str = Field(..., serialization_alias="redirectUrl")


class RequirementsData(BaseModel):
    """Payload of GET /api/account/requirements"""

    has_outstanding_requirements: bool = Field(..., serialization_alias="hasOutstandingRequirements")


def success_response(data: Optional[BaseModel] = None) -> JSONResponse:
    body = ApiResponse(success=True, data=data.model_dump(by_alias=True) if data is not None else None)
    return JSONResponse(status_code=200, content=body.model_dump(exclude_none=True))


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ApiResponse(success=False, error=ErrorDetail(message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
