"""Project query functions for DevCollab.

Provides async functions for creating, reading and updating Project records
using the SQLAlchemy 2.0 select() API.

Every mutation touches a single project row and stamps updated_at with the
database clock. The collaborator append locks the row (SELECT ... FOR
UPDATE on PostgreSQL) and re-checks membership inside the write
transaction, which gives set-union semantics under concurrent adds.

Each write function owns its transaction and must be called on a session
that has no transaction in progress.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from devcollab.database.models.project import Project, ProjectStatus, ProjectVisibility
from devcollab.errors import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)

# Bound on compare-and-swap retries of a collaborator append
MAX_APPEND_ATTEMPTS = 10


async def create_project(
    session: AsyncSession,
    owner_id: str,
    owner_email: str,
    name: str,
    description: str = "",
    visibility: ProjectVisibility = ProjectVisibility.private,
    tags: Sequence[str] = (),
) -> Project:
    """Create a new active project owned by owner_id.

    The owner's email becomes the first collaborator.

    Args:
        session: Async database session with no transaction in progress.
        owner_id: uid of the owning profile.
        owner_email: Email of the owner.
        name: Project name, already validated by the caller.
        description: Free-form description.
        visibility: Public or private.
        tags: Free-form labels.

    Returns:
        The newly created Project instance.
    """
    project = Project(
        name=name,
        description=description,
        visibility=visibility,
        owner_id=owner_id,
        owner_email=owner_email,
        collaborators=[owner_email],
        tags=list(tags),
        status=ProjectStatus.active,
    )

    async with session.begin():
        session.add(project)
        await session.flush()
        await session.refresh(project)

    logger.info(
        "project_created",
        project_id=str(project.id),
        owner_id=owner_id,
        name=name,
        visibility=visibility.value,
    )

    return project


async def get_project(
    session: AsyncSession,
    project_id: UUID,
) -> Project | None:
    """Retrieve a project by ID, always reflecting the stored row.

    Args:
        session: Active async database session.
        project_id: UUID of the project to retrieve.

    Returns:
        The Project instance if found, None otherwise.
    """
    stmt = (
        select(Project)
        .where(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_owned_projects(
    session: AsyncSession,
    owner_id: str,
) -> list[Project]:
    """List the projects owned by a user, newest first.

    Args:
        session: Active async database session.
        owner_id: uid of the owner.

    Returns:
        List of matching Project instances ordered by created_at descending.
    """
    stmt = (
        select(Project)
        .where(Project.owner_id == owner_id)
        .order_by(Project.created_at.desc())
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def find_project_by_repo_url(
    session: AsyncSession,
    repo_url: str,
) -> Project | None:
    """Find the project linked to a GitHub repository URL (exact match).

    Nothing in the schema forces repository URLs to be unique. When more
    than one project matches, the oldest one is returned and a warning is
    logged.

    Args:
        session: Active async database session.
        repo_url: HTML URL of the repository.

    Returns:
        The linked Project, or None if no project is linked to the URL.
    """
    stmt = (
        select(Project)
        .where(Project.github_repo == repo_url)
        .order_by(Project.created_at.asc())
        .limit(2)
    )
    result = await session.execute(stmt)
    matches = list(result.scalars().all())

    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "repository_linked_to_multiple_projects",
            repo_url=repo_url,
            selected_project_id=str(matches[0].id),
        )
    return matches[0]


async def add_collaborator(
    session: AsyncSession,
    project_id: UUID,
    email: str,
) -> tuple[Project, bool]:
    """Append an email to a project's collaborators unless already present.

    The append is a compare-and-swap: the UPDATE only matches while the
    stored list still equals the list the membership check was made
    against. A writer that loses to a concurrent append re-reads the row
    and checks again. PostgreSQL additionally holds a row lock for the
    read; SQLite ignores FOR UPDATE, so the conditional UPDATE is what
    keeps concurrent appends from overwriting each other there.

    Args:
        session: Async database session with no transaction in progress.
        project_id: UUID of the project.
        email: Collaborator email, already validated and trimmed.

    Returns:
        Tuple of (project, added). added is False when the email was
        already a collaborator when the append was attempted.

    Raises:
        NotFoundError: If the project does not exist.
        ConflictError: If concurrent writers kept winning the row.
    """
    added = False
    for attempt in range(1, MAX_APPEND_ATTEMPTS + 1):
        async with session.begin():
            stmt = (
                select(Project)
                .where(Project.id == project_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await session.execute(stmt)
            locked = result.scalar_one_or_none()
            if locked is None:
                raise NotFoundError(f"Project {project_id} not found")

            current = list(locked.collaborators)
            if email in current:
                break

            swapped = await session.execute(
                update(Project)
                .where(Project.id == project_id, Project.collaborators == current)
                .values(collaborators=[*current, email], updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            if swapped.rowcount == 1:
                added = True
                break

        logger.info("collaborator_append_retry", project_id=str(project_id), attempt=attempt)
    else:
        raise ConflictError("Project collaborators are being changed concurrently, try again")

    project = await get_project(session, project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")

    if added:
        logger.info(
            "collaborator_added",
            project_id=str(project_id),
            collaborator_count=len(project.collaborators),
        )
    else:
        logger.info("collaborator_already_present", project_id=str(project_id))

    return project, added


async def update_project(
    session: AsyncSession,
    project_id: UUID,
    **updates: Any,
) -> Project:
    """Merge fields into a project in one UPDATE and stamp updated_at.

    Args:
        session: Async database session with no transaction in progress.
        project_id: UUID of the project to update.
        **updates: Column names and values to merge.

    Returns:
        The updated Project instance.

    Raises:
        NotFoundError: If the project does not exist.
    """
    async with session.begin():
        stmt = (
            update(Project)
            .where(Project.id == project_id)
            .values(**updates, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)

    if result.rowcount == 0:
        raise NotFoundError(f"Project {project_id} not found")

    project = await get_project(session, project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")

    logger.info(
        "project_updated",
        project_id=str(project_id),
        fields_updated=list(updates.keys()),
    )

    return project


async def link_repository(
    session: AsyncSession,
    project_id: UUID,
    repo_url: str,
    repo_id: str,
) -> Project:
    """Set the repository URL and id of a project together."""
    return await update_project(
        session,
        project_id,
        github_repo=repo_url,
        github_repo_id=repo_id,
    )


async def set_readme(
    session: AsyncSession,
    project_id: UUID,
    readme: str,
) -> Project:
    """Replace the generated README of a project."""
    return await update_project(session, project_id, readme=readme)
