"""Request middleware for textlens.

Provides:
- Request ID propagation middleware
- Request logging middleware with metrics
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from textlens.core.logging import get_logger, reset_request_id, set_request_id
from textlens.core.metrics import record_http_request

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probe and scrape endpoints are logged at debug level only
QUIET_PATHS = frozenset({"/health/live", "/health/ready", "/metrics"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate a request ID.

    The ID from the X-Request-ID header is reused when present, otherwise a
    UUID is generated. It is bound to the logging context, stored on
    ``request.state`` for error responses and echoed in the response.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        token = set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests and record request metrics."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        start_time = time.perf_counter()
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        log(
            "Request started",
            component="api",
            method=request.method,
            path=path,
            query=str(request.url.query) if request.url.query else None,
        )

        response = await call_next(request)

        duration_seconds = time.perf_counter() - start_time

        log(
            "Request completed",
            component="api",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=int(duration_seconds * 1000),
        )

        # Safe - never raises
        record_http_request(
            method=request.method,
            path=path,
            status=response.status_code,
            duration=duration_seconds,
        )

        return response
