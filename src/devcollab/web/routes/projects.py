"""Project endpoints for DevCollab.

This module provides the REST API behind the dashboard and project pages:
- List the caller's projects with search and status filters
- Create a project
- Read a project
- Invite a collaborator by email
- Create and link a GitHub repository
- Generate the project README
- Build a shareable link

All rules live in ProjectService; handlers only translate HTTP to service
calls. Errors raised by the service are rendered by the exception
handlers in devcollab.web.errors.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi import status as http_status

from devcollab.auth import Identity
from devcollab.database.models.project import ProjectStatus
from devcollab.services.profiles import ProfileService
from devcollab.services.projects import ProjectService, filter_projects
from devcollab.web.dependencies import (
    get_current_identity,
    get_profile_service,
    get_project_service,
)
from devcollab.web.schemas import (
    CollaboratorAdd,
    ProjectCreate,
    ProjectResponse,
    ShareLinkResponse,
)


def create_projects_router() -> APIRouter:
    """Create projects router.

    Routes:
        GET /projects/ - List the caller's projects (?search=&status=)
        POST /projects/ - Create a project
        GET /projects/{project_id} - Get a project
        POST /projects/{project_id}/collaborators - Add a collaborator
        POST /projects/{project_id}/repository - Create and link a GitHub repository
        POST /projects/{project_id}/readme - Generate the README
        GET /projects/{project_id}/share-link - Get the project page URL
    """
    router = APIRouter(prefix="/projects", tags=["projects"])

    @router.get("/", response_model=list[ProjectResponse])
    async def list_projects(
        search: str | None = None,
        status: ProjectStatus | None = None,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
    ) -> list[ProjectResponse]:
        """List projects owned by the caller, newest first."""
        projects = await service.list_owned_projects(identity.uid)
        return [
            ProjectResponse.model_validate(p)
            for p in filter_projects(projects, search=search, status=status)
        ]

    @router.post("/", response_model=ProjectResponse, status_code=http_status.HTTP_201_CREATED)
    async def create_project(
        body: ProjectCreate,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
        profiles: ProfileService = Depends(get_profile_service),  # noqa: B008
    ) -> ProjectResponse:
        """Create a project owned by the caller."""
        # projects reference their owner's profile row
        await profiles.get_or_create_profile(identity)
        project = await service.create_project(
            identity,
            name=body.name,
            description=body.description,
            visibility=body.visibility,
            tags=body.tags,
        )
        return ProjectResponse.model_validate(project)

    @router.get("/{project_id}", response_model=ProjectResponse)
    async def get_project(
        project_id: UUID,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
    ) -> ProjectResponse:
        project = await service.get_project(project_id, identity)
        return ProjectResponse.model_validate(project)

    @router.post("/{project_id}/collaborators", response_model=ProjectResponse)
    async def add_collaborator(
        project_id: UUID,
        body: CollaboratorAdd,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
    ) -> ProjectResponse:
        project = await service.add_collaborator(project_id, identity, body.email)
        return ProjectResponse.model_validate(project)

    @router.post("/{project_id}/repository", response_model=ProjectResponse)
    async def connect_repository(
        project_id: UUID,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
    ) -> ProjectResponse:
        project = await service.connect_repository(project_id, identity)
        return ProjectResponse.model_validate(project)

    @router.post("/{project_id}/readme", response_model=ProjectResponse)
    async def generate_readme(
        project_id: UUID,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
    ) -> ProjectResponse:
        project = await service.generate_readme(project_id, identity)
        return ProjectResponse.model_validate(project)

    @router.get("/{project_id}/share-link", response_model=ShareLinkResponse)
    async def share_link(
        project_id: UUID,
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        service: ProjectService = Depends(get_project_service),  # noqa: B008
    ) -> ShareLinkResponse:
        url = await service.share_link(project_id, identity)
        return ShareLinkResponse(url=url)

    return router
