"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "connect-onboarding"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_registration(request_id: str, account_id: str, country: str, duration_ms: float) -> None:
    """Log a completed registration. The email is left out as personal data."""
    logging.info(
        "Registration completed",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "country": country,
            "step": "registration_complete",
            "duration_ms": duration_ms,
        },
    )


def log_onboarding(request_id: str, account_id: str, skipped: bool, duration_ms: float) -> None:
    """Log a completed onboarding submission"""
    logging.info(
        "Onboarding submitted",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "onboarding_complete",
            "onboarding_outcome": "skipped" if skipped else "hosted_link",
            "duration_ms": duration_ms,
        },
    )
