"""Request logging middleware for DevCollab.

This module provides middleware for logging HTTP requests with:
- Request method, path, route template and status code
- Request duration in milliseconds
- Correlation IDs taken from or returned in X-Correlation-ID

Example:
    >>> from fastapi import FastAPI
    >>> from devcollab.web.middleware import RequestLoggingMiddleware
    >>>
    >>> app = FastAPI()
    >>> app.add_middleware(RequestLoggingMiddleware)
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from devcollab.logging import get_logger, set_correlation_id

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Liveness and readiness checks hit these every few seconds
HEALTH_PATH_PREFIX = "/health"


def route_template(request: Request) -> str | None:
    """Path template of the matched route, such as ``/projects/{project_id}``."""
    return getattr(request.scope.get("route"), "path", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs HTTP requests with timing and correlation IDs.

    The correlation ID is extracted from the X-Correlation-ID header if
    present, otherwise a new UUID is generated. It is echoed back on the
    response. Context bound during the request (such as the caller's uid)
    is cleared before the next request on the same task. Health checks
    are logged at DEBUG.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request with logging.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            HTTP response from downstream handlers
        """
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        set_correlation_id(correlation_id)

        log = logger.debug if request.url.path.startswith(HEALTH_PATH_PREFIX) else logger.info

        start_time = time.perf_counter()
        log(
            "request_started",
            method=request.method,
            path=request.url.path,
            query=str(request.url.query) if request.url.query else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                route=route_template(request),
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
                exc_info=True,
            )
            raise

        finally:
            set_correlation_id(None)
