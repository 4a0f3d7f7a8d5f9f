"""FastAPI middleware for request tracing and metrics"""

import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from connect_onboarding.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's request ID or mint one, and echo it back"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def route_template(request: Request) -> str:
    """Full path template of the matched route, including any mount prefix"""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path is None:
        return "unmatched"
    # Routes under a router prefix or mount may report only their local path
    template_parts = path.strip("/").split("/")
    request_parts = request.url.path.strip("/").split("/")
    prefix_length = len(request_parts) - len(template_parts)
    if prefix_length > 0:
        prefix = "/" + "/".join(request_parts[:prefix_length])
        if not path.startswith(prefix + "/"):
            path = prefix + path
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request latency per route template"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        endpoint = route_template(request)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(time.time() - start_time)

        return response
