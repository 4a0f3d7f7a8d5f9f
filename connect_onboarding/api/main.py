"""FastAPI application factory"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response

from connect_onboarding.api.middleware import RequestIDMiddleware, MetricsMiddleware
from connect_onboarding.api.v1 import account, onboard, register
from connect_onboarding.api.v1.schemas import error_response
from connect_onboarding.infrastructure.observability.logging import setup_logging
from connect_onboarding.config import Settings, settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app_settings = app_settings or settings

    app = FastAPI(
        title="Connect Onboarding",
        description="Connected account registration and onboarding service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = app_settings

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=app_settings.session_secret_key,
        session_cookie=app_settings.session_cookie_name,
    )
    app.add_middleware(RequestIDMiddleware)

    # Keep the API envelope for framework-level errors too
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Request body must be a JSON object")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": app_settings.service_name,
            "demo_mode": app_settings.demo_mode,
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(register.router, prefix="/api", tags=["registration"])
    app.include_router(onboard.router, prefix="/api", tags=["onboarding"])
    app.include_router(account.router, prefix="/api", tags=["account"])

    return app


app = create_app()
