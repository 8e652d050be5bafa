"""FastAPI dependencies shared by the DevCollab routers.

Services and adapter clients are built once in the application lifespan
and stored on app.state; these functions hand them to route handlers.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devcollab.auth import FirebaseIdentityVerifier, Identity
from devcollab.config import DevCollabConfig
from devcollab.errors import AuthenticationError
from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.github import GitHubClient
from devcollab.logging import bind_actor_context
from devcollab.services.notifications import NotificationService
from devcollab.services.profiles import ProfileService
from devcollab.services.projects import ProjectService
from devcollab.services.relay import PushEventRelay

bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request) -> DevCollabConfig:
    """Dependency that retrieves the configuration from app state."""
    return request.app.state.config  # type: ignore[no-any-return]


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Dependency that retrieves session factory from app state.

    Args:
        request: FastAPI request object

    Returns:
        Session factory from app.state
    """
    return request.app.state.session_factory  # type: ignore[no-any-return]


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service  # type: ignore[no-any-return]


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service  # type: ignore[no-any-return]


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service  # type: ignore[no-any-return]


def get_push_relay(request: Request) -> PushEventRelay:
    return request.app.state.push_relay  # type: ignore[no-any-return]


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github  # type: ignore[no-any-return]


def get_gemini_client(request: Request) -> GeminiClient:
    return request.app.state.gemini  # type: ignore[no-any-return]


def get_identity_verifier(request: Request) -> FirebaseIdentityVerifier:
    return request.app.state.identity_verifier  # type: ignore[no-any-return]


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    verifier: FirebaseIdentityVerifier = Depends(get_identity_verifier),  # noqa: B008
) -> Identity:
    """Verify the bearer token and bind the caller to the request's logs.

    Raises:
        AuthenticationError: If the Authorization header is missing or the
            token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    identity = await verifier.verify(credentials.credentials)
    bind_actor_context(identity.uid)
    return identity
