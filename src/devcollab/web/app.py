"""FastAPI application factory for DevCollab.

This module provides the application factory that creates and configures
a FastAPI application with:
- CORS middleware for the browser frontend
- Request logging middleware with correlation IDs
- Exception handlers mapping DevCollab errors to JSON responses
- Database, adapter client and service lifecycle management

Example usage:
    >>> from devcollab.config import DevCollabConfig
    >>> from devcollab.web.app import create_app
    >>>
    >>> app = create_app(DevCollabConfig())
    >>>
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devcollab import __version__
from devcollab.auth import FirebaseIdentityVerifier
from devcollab.config import DevCollabConfig
from devcollab.database.connection import get_engine, get_session_factory
from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.github import GitHubClient
from devcollab.integrations.mailer import Mailer
from devcollab.logging import get_logger
from devcollab.services.notifications import NotificationService
from devcollab.services.profiles import ProfileService
from devcollab.services.projects import ProjectService
from devcollab.services.relay import PushEventRelay
from devcollab.web.errors import register_exception_handlers
from devcollab.web.middleware import RequestLoggingMiddleware
from devcollab.web.routes import (
    create_ai_router,
    create_github_router,
    create_health_router,
    create_notifications_router,
    create_profiles_router,
    create_projects_router,
    create_webhooks_router,
)

logger = get_logger(__name__)


def install_services(
    app: FastAPI,
    session_factory: async_sessionmaker[AsyncSession],
    github: GitHubClient,
    gemini: GeminiClient,
    mailer: Mailer,
    identity_verifier: FirebaseIdentityVerifier,
) -> None:
    """Wire adapters and services into app.state for dependency injection.

    Args:
        app: Application created by create_app
        session_factory: Factory producing database sessions
        github: Repository creation adapter
        gemini: Text generation adapter
        mailer: SMTP adapter
        identity_verifier: Bearer token verifier
    """
    config: DevCollabConfig = app.state.config
    notifications = NotificationService(gemini, mailer)

    app.state.session_factory = session_factory
    app.state.github = github
    app.state.gemini = gemini
    app.state.mailer = mailer
    app.state.identity_verifier = identity_verifier
    app.state.notification_service = notifications
    app.state.profile_service = ProfileService(session_factory)
    app.state.project_service = ProjectService(
        session_factory,
        github,
        gemini,
        public_url=config.web.public_url,
    )
    app.state.push_relay = PushEventRelay(
        session_factory,
        notifications,
        primary_branches=config.github.primary_branches,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup creates the database engine and the adapter clients and
    stores the services built on them in app.state. On shutdown closes the
    HTTP clients and disposes the connection pool.

    Args:
        app: FastAPI application instance

    Yields:
        None after startup, cleans up on context exit
    """
    config: DevCollabConfig = app.state.config

    logger.info("app_startup_begin", host=config.web.host, port=config.web.port)

    engine = get_engine(config.database)
    github = GitHubClient(config.github)
    gemini = GeminiClient(config.gemini)

    app.state.engine = engine
    install_services(
        app,
        session_factory=get_session_factory(engine),
        github=github,
        gemini=gemini,
        mailer=Mailer(config.mail),
        identity_verifier=FirebaseIdentityVerifier(config.firebase),
    )

    logger.info(
        "database_pool_initialized",
        pool_size=config.database.pool_size,
        max_overflow=config.database.max_overflow,
    )

    yield

    logger.info("app_shutdown_begin")
    await github.close()
    await gemini.close()
    await engine.dispose()
    logger.info("database_pool_disposed")


def create_app(config: DevCollabConfig | None = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Args:
        config: Optional DevCollabConfig. If None, creates default config.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = DevCollabConfig()

    app = FastAPI(
        title="DevCollab",
        version=__version__,
        description="Developer project collaboration API",
        lifespan=lifespan,
    )

    # Store config in app.state for lifespan access
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(create_health_router())
    app.include_router(create_profiles_router())
    app.include_router(create_projects_router())
    app.include_router(create_ai_router())
    app.include_router(create_github_router())
    app.include_router(create_notifications_router())
    app.include_router(create_webhooks_router())

    logger.info(
        "app_created",
        cors_origins=config.web.cors_origins,
        version=__version__,
    )

    return app
