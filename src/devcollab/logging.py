"""Structured logging configuration for DevCollab.

Every request handled by the API logs through structlog with the
request's correlation id, the caller's uid and, once a handler has
resolved it, the project the request acts on. Fields that carry
credentials (GitHub token, Gemini key, SMTP password, bearer tokens) are
masked before rendering.

Python's stdlib logging provides the handlers (stdout or a rotating
file); the HTTP and SMTP client libraries log through it as well and are
held at WARNING unless DEBUG is requested.

Example usage:
    >>> from devcollab.config import LoggingConfig
    >>> from devcollab.logging import setup_logging, get_logger, bind_project_context
    >>>
    >>> setup_logging(LoggingConfig(level="INFO", format="console"))
    >>> logger = get_logger(__name__)
    >>> bind_project_context(project.id)
    >>> logger.info("collaborator_added", collaborator_count=2)
"""

from __future__ import annotations

import contextvars
import logging
import logging.handlers
import sys
from typing import Any
from uuid import UUID

import structlog

from devcollab.config import LoggingConfig

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

SENSITIVE_KEYS = frozenset({"token", "api_key", "password", "authorization", "secret"})
REDACTED = "***"

# Client libraries that log one line per request or SMTP command at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "aiosmtplib", "google.auth", "urllib3")


def add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor adding the request's correlation_id, if any."""
    correlation_id = _correlation_id.get()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor masking credential-like fields.

    A key is masked when it equals one of SENSITIVE_KEYS or ends with
    ``_<key>`` (``github_token``, ``webhook_secret``).
    """
    for key in event_dict:
        lowered = key.lower()
        if lowered in SENSITIVE_KEYS or any(lowered.endswith(f"_{s}") for s in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
    return event_dict


def set_correlation_id(correlation_id: str | None) -> None:
    """Set correlation ID for current context."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def bind_actor_context(uid: str) -> None:
    """Bind the authenticated user's uid to all subsequent logs of this context.

    Args:
        uid: Identity provider user id of the caller
    """
    structlog.contextvars.bind_contextvars(actor_uid=uid)


def bind_project_context(project_id: UUID | str) -> None:
    """Bind the project a request acts on to all subsequent logs of this context.

    Args:
        project_id: Project UUID
    """
    structlog.contextvars.bind_contextvars(project_id=str(project_id))


def setup_logging(config: LoggingConfig) -> None:
    """Configure structlog and the stdlib handlers from configuration.

    Args:
        config: Logging configuration from DevCollabConfig
    """
    log_level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler: logging.Handler
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=config.file,
            maxBytes=config.rotation_size_mb * 1024 * 1024,
            backupCount=config.retention_count,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    library_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    if config.format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.contextvars.merge_contextvars,
            add_correlation_id,
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)
