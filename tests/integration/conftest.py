"""Pytest fixtures for integration tests.

Provides an in-memory SQLite database shared by every session of a test
(StaticPool keeps the single connection alive), the DevCollab services
wired to it, and a FastAPI app with the adapters pointed at mockable
endpoints. The production system runs on PostgreSQL; the queries used
here are portable.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from devcollab.auth import Identity
from devcollab.config import DevCollabConfig, GeminiConfig, GitHubConfig, MailConfig, WebConfig
from devcollab.database.models import Base, Profile, Project
from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.github import GitHubClient
from devcollab.integrations.mailer import Mailer
from devcollab.services.notifications import NotificationService
from devcollab.services.profiles import ProfileService
from devcollab.services.projects import ProjectService
from devcollab.web.app import create_app, install_services
from devcollab.web.dependencies import get_current_identity

GITHUB_API = "https://api.github.test"
GEMINI_API = "https://gemini.test/v1beta"
PUBLIC_URL = "https://devcollab.test"


@pytest.fixture
def alice() -> Identity:
    return Identity(uid="uid-alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob() -> Identity:
    return Identity(uid="uid-bob", email="bob@example.com", display_name="Bob")


@pytest.fixture
def test_config() -> DevCollabConfig:
    """Configuration with every adapter credential set to a test value."""
    return DevCollabConfig(
        web=WebConfig(public_url=PUBLIC_URL + "/"),
        github=GitHubConfig(token="ghp_test", api_url=GITHUB_API),
        gemini=GeminiConfig(api_key="gemini-test", api_url=GEMINI_API),
        mail=MailConfig(username="bot@example.com", password="secret"),
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite async engine with all tables.

    Yields:
        Configured AsyncEngine instance using in-memory SQLite.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session with no transaction in progress, as the query functions expect."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def add_profile(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Profile]]:
    """Insert a profile row for an identity."""

    async def _add(identity: Identity) -> Profile:
        async with session_factory() as session:
            async with session.begin():
                profile = Profile(
                    uid=identity.uid,
                    email=identity.email,
                    display_name=identity.display_name or identity.email,
                )
                session.add(profile)
        return profile

    return _add


@pytest.fixture
def add_project(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Project]]:
    """Insert a project row directly, bypassing the service rules."""

    async def _add(owner: Identity, name: str, **fields: Any) -> Project:
        fields.setdefault("collaborators", [owner.email])
        created_at: datetime | None = fields.pop("created_at", None)
        project = Project(
            name=name,
            owner_id=owner.uid,
            owner_email=owner.email,
            **fields,
        )
        if created_at is not None:
            project.created_at = created_at
        async with session_factory() as session:
            async with session.begin():
                session.add(project)
                await session.flush()
                await session.refresh(project)
        return project

    return _add


@pytest.fixture
def mailer() -> AsyncMock:
    """Mailer stand-in recording send_project_update calls."""
    mock = AsyncMock(spec=Mailer)
    mock.send_project_update.return_value = None
    return mock


@pytest_asyncio.fixture
async def github_client(test_config: DevCollabConfig) -> AsyncGenerator[GitHubClient, None]:
    client = GitHubClient(test_config.github)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def gemini_client(test_config: DevCollabConfig) -> AsyncGenerator[GeminiClient, None]:
    client = GeminiClient(test_config.gemini)
    yield client
    await client.close()


@pytest.fixture
def profile_service(session_factory: async_sessionmaker[AsyncSession]) -> ProfileService:
    return ProfileService(session_factory)


@pytest.fixture
def project_service(
    session_factory: async_sessionmaker[AsyncSession],
    github_client: GitHubClient,
    gemini_client: GeminiClient,
) -> ProjectService:
    return ProjectService(session_factory, github_client, gemini_client, PUBLIC_URL)


@pytest.fixture
def notification_service(gemini_client: GeminiClient, mailer: AsyncMock) -> NotificationService:
    return NotificationService(gemini_client, mailer)


@pytest.fixture
def identity_verifier() -> MagicMock:
    verifier = MagicMock()
    verifier.verify = AsyncMock()
    return verifier


@pytest.fixture
def app(
    test_config: DevCollabConfig,
    session_factory: async_sessionmaker[AsyncSession],
    github_client: GitHubClient,
    gemini_client: GeminiClient,
    mailer: AsyncMock,
    identity_verifier: MagicMock,
) -> Any:
    """FastAPI app wired to the test database and adapters.

    The lifespan does not run under ASGITransport, so services are
    installed directly.
    """
    test_app = create_app(test_config)
    install_services(
        test_app,
        session_factory=session_factory,
        github=github_client,
        gemini=gemini_client,
        mailer=mailer,
        identity_verifier=identity_verifier,
    )
    return test_app


@pytest.fixture
def sign_in(app: Any) -> Callable[[Identity], None]:
    """Make every request of the app authenticate as the given identity."""

    def _sign_in(identity: Identity) -> None:
        app.dependency_overrides[get_current_identity] = lambda: identity

    return _sign_in


@pytest_asyncio.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
