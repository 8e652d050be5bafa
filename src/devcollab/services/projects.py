"""Project creation, collaboration and integration rules.

ProjectService is the only writer of project rows. Every operation reads
the project, checks the caller's rights, optionally calls an external
adapter, and only then issues a single-row update. An adapter failure
leaves the project untouched and propagates to the caller; nothing is
retried.

Example:
    >>> service = ProjectService(session_factory, github, gemini, "https://devcollab.app")
    >>> project = await service.create_project(identity, "My Cool App", "Demo")
    >>> project = await service.add_collaborator(project.id, identity, "bob@example.com")
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Callable
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devcollab.auth import Identity
from devcollab.database.models.project import Project, ProjectStatus, ProjectVisibility
from devcollab.database.queries import project as project_queries
from devcollab.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.github import GitHubClient
from devcollab.logging import bind_project_context

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def filter_projects(
    projects: Iterable[Project],
    search: str | None = None,
    status: ProjectStatus | None = None,
) -> list[Project]:
    """Filter an already-loaded project list for display.

    Args:
        projects: Projects to filter, order is preserved.
        search: Case-insensitive substring matched against name and
            description. Blank matches everything.
        status: Only keep projects with this status.

    Returns:
        The matching projects.
    """
    needle = (search or "").strip().lower()
    matches = []
    for project in projects:
        if status is not None and project.status != status:
            continue
        if needle and needle not in project.name.lower() and needle not in (project.description or "").lower():
            continue
        matches.append(project)
    return matches


class ProjectService:
    """Applies the collaboration rules to the project store.

    Attributes:
        session_factory: Callable that produces async database sessions.
        github: Repository creation adapter.
        gemini: README generation adapter.
        public_url: Base URL of the web frontend, without trailing slash.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        github: GitHubClient,
        gemini: GeminiClient,
        public_url: str,
    ) -> None:
        self.session_factory = session_factory
        self.github = github
        self.gemini = gemini
        self.public_url = public_url.rstrip("/")

    async def _load(self, project_id: UUID) -> Project:
        bind_project_context(project_id)
        async with self.session_factory() as session:
            project = await project_queries.get_project(session, project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    async def _load_owned(self, project_id: UUID, requester: Identity) -> Project:
        project = await self._load(project_id)
        if not project.is_owned_by(requester.uid):
            logger.warning(
                "project_owner_check_failed",
                project_id=str(project_id),
                requester_uid=requester.uid,
            )
            raise ForbiddenError("Only the project owner can perform this action")
        return project

    async def create_project(
        self,
        owner: Identity,
        name: str,
        description: str = "",
        visibility: ProjectVisibility = ProjectVisibility.private,
        tags: Sequence[str] = (),
    ) -> Project:
        """Create an active project with the owner as first collaborator.

        The owner must already have a profile.

        Raises:
            InvalidInputError: If name is empty after trimming.
        """
        name = name.strip()
        if not name:
            raise InvalidInputError("Project name is required")

        clean_tags = [tag.strip() for tag in tags if tag.strip()]
        async with self.session_factory() as session:
            return await project_queries.create_project(
                session,
                owner_id=owner.uid,
                owner_email=owner.email,
                name=name,
                description=(description or "").strip(),
                visibility=visibility,
                tags=clean_tags,
            )

    async def list_owned_projects(self, owner_id: str) -> list[Project]:
        """List the projects a user owns, newest first."""
        async with self.session_factory() as session:
            return await project_queries.list_owned_projects(session, owner_id)

    async def get_project(self, project_id: UUID, requester: Identity) -> Project:
        """Return a project the requester may read.

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the project is private and the requester is
                neither the owner nor a collaborator.
        """
        project = await self._load(project_id)
        if not project.can_be_read_by(requester.uid, requester.email):
            raise ForbiddenError("You do not have access to this project")
        return project

    async def share_link(self, project_id: UUID, requester: Identity) -> str:
        """Build the frontend URL of a project page."""
        project = await self.get_project(project_id, requester)
        return f"{self.public_url}/{project.owner_id}/project/{project.id}"

    async def add_collaborator(
        self,
        project_id: UUID,
        requester: Identity,
        email: str,
    ) -> Project:
        """Invite a collaborator by email.

        Args:
            project_id: Project to share.
            requester: Caller, who must own the project.
            email: Address to add; surrounding whitespace is ignored.

        Returns:
            The updated project.

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the requester is not the owner.
            InvalidInputError: If the address is malformed.
            ConflictError: If the address is already a collaborator.
        """
        project = await self._load_owned(project_id, requester)

        email = (email or "").strip()
        if not EMAIL_PATTERN.match(email):
            raise InvalidInputError(f"Invalid email address: {email!r}")
        if email in project.collaborators:
            raise ConflictError(f"{email} is already a collaborator")

        async with self.session_factory() as session:
            project, added = await project_queries.add_collaborator(session, project_id, email)
        if not added:
            # another request added the same address after the read above
            raise ConflictError(f"{email} is already a collaborator")
        return project

    async def connect_repository(self, project_id: UUID, requester: Identity) -> Project:
        """Create a GitHub repository for the project and link it.

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the requester is not the owner.
            ConflictError: If a repository is already linked.
            UpstreamError: If GitHub is not configured or rejects the call.
        """
        project = await self._load_owned(project_id, requester)
        if project.has_repository:
            raise ConflictError(f"Project is already linked to {project.github_repo}")

        repository = await self.github.create_repository(
            project.name,
            description=project.description or None,
            private=project.visibility is ProjectVisibility.private,
        )

        async with self.session_factory() as session:
            project = await project_queries.link_repository(
                session,
                project_id,
                repo_url=repository.html_url,
                repo_id=str(repository.id),
            )
        logger.info(
            "project_repository_linked",
            project_id=str(project_id),
            repo_url=repository.html_url,
        )
        return project

    async def generate_readme(self, project_id: UUID, requester: Identity) -> Project:
        """Generate a README with Gemini and store it, replacing any previous one.

        Raises:
            NotFoundError: If the project does not exist.
            ForbiddenError: If the requester is not the owner.
            UpstreamError: If Gemini is not configured or fails.
        """
        project = await self._load_owned(project_id, requester)

        readme = await self.gemini.generate_readme(
            project.name,
            project.description,
            project.github_repo,
        )

        async with self.session_factory() as session:
            project = await project_queries.set_readme(session, project_id, readme)
        logger.info(
            "project_readme_generated",
            project_id=str(project_id),
            readme_length=len(readme),
        )
        return project
