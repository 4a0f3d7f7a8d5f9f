"""Request payload schemas and eager validation.

Every schema is validated in full so that the caller gets all violations at
once. ``validate`` turns pydantic's error list into a ``ValidationError``
with one readable message per violation.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from connect_onboarding.domain.exceptions import ValidationError
from connect_onboarding.domain.models import SUPPORTED_COUNTRIES

MAX_LENGTH = 255
MIN_PASSWORD_LENGTH = 8

FIELD_LABELS = {
    "email": "Email",
    "password": "Password",
    "country": "Country",
    "businessName": "Business name",
    "skipOnboarding": "Skip onboarding",
}

# (pattern, character kind) pairs checked independently
PASSWORD_CHARACTER_RULES = (
    (re.compile(r"[0-9]"), "digit"),
    (re.compile(r"[a-z]"), "lowercase"),
    (re.compile(r"[A-Z]"), "uppercase"),
)


def password_rule_violations(password: str) -> List[str]:
    """Return a message for every password rule the value breaks"""
    violations = []
    if len(password) < MIN_PASSWORD_LENGTH:
        violations.append(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")
    for pattern, kind in PASSWORD_CHARACTER_RULES:
        if not pattern.search(password):
            violations.append(f"Your password must have at least 1 {kind} character")
    return violations


class UserRegistration(BaseModel):
    """Body of POST /api/register"""

    email: str = Field(..., max_length=MAX_LENGTH)
    password: str = Field(..., max_length=MAX_LENGTH)
    country: str

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("invalid_email", "Must be a valid email")
        return value

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        violations = password_rule_violations(value)
        if violations:
            raise PydanticCustomError(
                "password_strength",
                "{summary}",
                {"summary": "; ".join(violations), "rules": tuple(violations)},
            )
        return value

    @field_validator("country")
    @classmethod
    def check_country_supported(cls, value: str) -> str:
        if value not in SUPPORTED_COUNTRIES:
            raise PydanticCustomError(
                "unsupported_country",
                "Country must be one of: {supported}",
                {"supported": ", ".join(SUPPORTED_COUNTRIES)},
            )
        return value


class BusinessDetails(BaseModel):
    """Body of POST /api/onboard outside demo mode.

    Unknown fields, including ``skipOnboarding``, are ignored.
    """

    business_name: str = Field(..., alias="businessName", max_length=MAX_LENGTH)

    @field_validator("business_name")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise PydanticCustomError("blank", "Business name is required")
        return value

    @property
    def skip_requested(self) -> bool:
        return False


class BusinessDetailsWithSkip(BusinessDetails):
    """Demo-mode variant that honors the onboarding bypass"""

    skip_onboarding: Optional[bool] = Field(False, alias="skipOnboarding")

    @property
    def skip_requested(self) -> bool:
        return bool(self.skip_onboarding)


# demo_mode -> onboarding schema
ONBOARDING_SCHEMAS: Dict[bool, Type[BusinessDetails]] = {
    False: BusinessDetails,
    True: BusinessDetailsWithSkip,
}


def onboarding_schema(demo_mode: bool) -> Type[BusinessDetails]:
    """Pick the onboarding schema for the given mode"""
    return ONBOARDING_SCHEMAS[bool(demo_mode)]


def _describe(error: Dict[str, Any]) -> List[str]:
    """Render one pydantic error as one or more human-readable messages"""
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else ""
    label = FIELD_LABELS.get(field, field or "Request body")
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type == "password_strength":
        return list(ctx["rules"])
    if error_type == "missing":
        return [f"{label} is required"]
    if error_type == "string_too_long":
        return [f"{label} must be at most {ctx['max_length']} characters"]
    if error_type in ("invalid_email", "unsupported_country", "blank"):
        return [error["msg"]]
    return [f"{label}: {error['msg']}"]


M = TypeVar("M", bound=BaseModel)


def validate(schema: Type[M], data: Optional[Mapping[str, Any]]) -> M:
    """
    Validate a record against a schema, collecting every violation.

    Raises:
        ValidationError: With one message per violated rule
    """
    try:
        return schema.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        messages: List[str] = []
        for error in e.errors():
            messages.extend(_describe(error))
        raise ValidationError(messages) from e
