"""Stand-alone adapter endpoints under /api.

These endpoints expose the external-service adapters directly:
- POST /api/ai/generate-readme - README markdown from project details
- POST /api/github/create-repo - Create a GitHub repository
- POST /api/notifications/send-update - Summarize changes and email collaborators

They do not read or write the project store.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from devcollab.auth import Identity
from devcollab.errors import DevCollabError, InvalidInputError, UpstreamError
from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.github import GitHubClient
from devcollab.logging import get_logger
from devcollab.services.notifications import NotificationService
from devcollab.web.dependencies import (
    get_current_identity,
    get_gemini_client,
    get_github_client,
    get_notification_service,
)
from devcollab.web.schemas import (
    CreateRepoRequest,
    GenerateReadmeRequest,
    GenerateReadmeResponse,
    RepositoryResponse,
    SendUpdateRequest,
    SendUpdateResponse,
)

logger = get_logger(__name__)


def create_ai_router() -> APIRouter:
    """Create the README generation router."""
    router = APIRouter(prefix="/api/ai", tags=["ai"])

    @router.post("/generate-readme", response_model=GenerateReadmeResponse)
    async def generate_readme(
        body: GenerateReadmeRequest,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        gemini: GeminiClient = Depends(get_gemini_client),  # noqa: B008
    ) -> GenerateReadmeResponse:
        """Generate README markdown.

        Any generation or configuration failure is reported as 500.
        """
        if not body.project_name or not body.project_name.strip():
            raise InvalidInputError("Project name is required")

        try:
            readme = await gemini.generate_readme(
                body.project_name,
                body.description,
                body.github_repo,
                project_type=body.project_type,
            )
        except UpstreamError as e:
            raise DevCollabError(f"Failed to generate README: {e.message}") from e

        return GenerateReadmeResponse(readme=readme, generated_at=datetime.now(timezone.utc))

    return router


def create_github_router() -> APIRouter:
    """Create the repository creation router."""
    router = APIRouter(prefix="/api/github", tags=["github"])

    @router.post("/create-repo", response_model=RepositoryResponse)
    async def create_repo(
        body: CreateRepoRequest,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        github: GitHubClient = Depends(get_github_client),  # noqa: B008
    ) -> RepositoryResponse:
        """Create a repository; GitHub's error status is passed through."""
        repository = await github.create_repository(
            body.name or "",
            description=body.description,
            private=body.private,
        )
        return RepositoryResponse(**repository.to_dict())

    return router


def create_notifications_router() -> APIRouter:
    """Create the collaborator notification router."""
    router = APIRouter(prefix="/api/notifications", tags=["notifications"])

    @router.post("/send-update", response_model=SendUpdateResponse)
    async def send_update(
        body: SendUpdateRequest,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        notifications: NotificationService = Depends(get_notification_service),  # noqa: B008
    ) -> SendUpdateResponse:
        """Summarize changes and email every collaborator; any failure is 500."""
        try:
            summary = await notifications.send_update(
                body.project_name,
                body.collaborators,
                body.changes,
                body.github_repo,
            )
        except Exception as e:
            logger.error(
                "send_update_failed",
                project_name=body.project_name,
                error=str(e),
                exc_info=True,
            )
            raise DevCollabError("Failed to send notifications") from e

        return SendUpdateResponse(success=True, summary=summary)

    return router
