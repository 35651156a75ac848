"""Request context and HTTP logging middleware.

``RequestContextMiddleware`` stores a per-request UUID in a context variable
(readable anywhere through ``get_request_id``) and echoes it in the
``X-Request-ID`` response header. ``LoggingMiddleware`` logs each request
with its timing.

Add them so that RequestContextMiddleware runs first:
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)
"""

import time
import uuid
from contextvars import ContextVar
from typing import Optional

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Paths polled by load balancers or mobile clients, not worth a log line
QUIET_PATHS = frozenset({"/health"})


def get_request_id() -> Optional[str]:
    """Return the current request ID, or None outside a request."""
    return request_id_var.get()


def set_request_id(request_id: Optional[str]) -> None:
    """Bind a request ID to the current context (also used by background tasks)."""
    request_id_var.set(request_id)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Generate a request_id per request and expose it to logs and clients."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log request start and completion with duration in milliseconds."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query_params=str(request.query_params),
            client_ip=request.client.host if request.client else None,
        )

        response = await call_next(request)

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response
