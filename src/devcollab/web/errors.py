"""Exception handlers mapping DevCollab errors to JSON responses.

Every error body has the shape ``{"detail": ..., "correlation_id": ...}``
so a client can quote the id when reporting a problem.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from devcollab.errors import DevCollabError, UpstreamError
from devcollab.logging import get_correlation_id, get_logger

logger = get_logger(__name__)

# Malformed bodies on the adapter endpoints keep the statuses their
# clients were written against; everything else gets the usual 422.
VALIDATION_STATUS_BY_PREFIX: dict[str, tuple[int, str]] = {
    "/api/notifications/": (500, "Failed to send notifications"),
    "/api/github/": (400, "Invalid request body"),
    "/api/ai/": (400, "Invalid request body"),
}


def error_response(status_code: int, detail: str) -> JSONResponse:
    """Build a JSON error body carrying the request's correlation id."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "correlation_id": get_correlation_id()},
    )


async def devcollab_error_handler(request: Request, exc: DevCollabError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.warning(
            "upstream_error",
            path=request.url.path,
            service=exc.service,
            kind=exc.kind.value,
            upstream_status=exc.upstream_status,
            error=exc.message,
        )
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=exc.status_code,
            error=exc.message,
        )
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    path = request.url.path
    logger.info("request_body_invalid", path=path, errors=len(exc.errors()))
    for prefix, (status_code, detail) in VALIDATION_STATUS_BY_PREFIX.items():
        if path.startswith(prefix):
            return error_response(status_code, detail)
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "correlation_id": get_correlation_id()},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the DevCollab exception handlers on an application."""
    app.add_exception_handler(DevCollabError, devcollab_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
