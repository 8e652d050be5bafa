"""Integration tests for project query functions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devcollab.auth import Identity
from devcollab.database.models import ProjectStatus, ProjectVisibility
from devcollab.database.queries import project as project_queries
from devcollab.errors import NotFoundError

AddProject = Callable[..., Awaitable[Any]]


@pytest_asyncio.fixture(autouse=True)
async def profiles(add_profile: Callable[..., Awaitable[Any]], alice: Identity, bob: Identity) -> None:
    await add_profile(alice)
    await add_profile(bob)


@pytest.mark.asyncio
async def test_create_project_owner_is_first_collaborator(db_session: AsyncSession) -> None:
    project = await project_queries.create_project(
        db_session,
        owner_id="uid-alice",
        owner_email="alice@example.com",
        name="DevCollab",
        description="Team tool",
        visibility=ProjectVisibility.public,
        tags=["python", "api"],
    )

    assert project.id is not None
    assert project.collaborators == ["alice@example.com"]
    assert project.status is ProjectStatus.active
    assert project.visibility is ProjectVisibility.public
    assert project.tags == ["python", "api"]
    assert project.github_repo is None and project.github_repo_id is None
    assert project.created_at is not None


@pytest.mark.asyncio
async def test_list_owned_projects_newest_first(
    db_session: AsyncSession,
    add_project: AddProject,
    alice: Identity,
    bob: Identity,
) -> None:
    now = datetime.now(timezone.utc)
    await add_project(alice, "old", created_at=now - timedelta(days=2))
    await add_project(alice, "new", created_at=now)
    await add_project(alice, "middle", created_at=now - timedelta(days=1))
    await add_project(bob, "not mine", created_at=now)

    projects = await project_queries.list_owned_projects(db_session, "uid-alice")

    assert [p.name for p in projects] == ["new", "middle", "old"]


@pytest.mark.asyncio
async def test_find_project_by_repo_url_exact_match(
    db_session: AsyncSession,
    add_project: AddProject,
    alice: Identity,
) -> None:
    url = "https://github.com/alice/devcollab"
    await add_project(alice, "linked", github_repo=url, github_repo_id="1")

    assert (await project_queries.find_project_by_repo_url(db_session, url)).name == "linked"
    assert await project_queries.find_project_by_repo_url(db_session, url + "/") is None
    assert await project_queries.find_project_by_repo_url(db_session, url.upper()) is None


@pytest.mark.asyncio
async def test_find_project_by_repo_url_prefers_oldest(
    db_session: AsyncSession,
    add_project: AddProject,
    alice: Identity,
) -> None:
    url = "https://github.com/alice/shared"
    now = datetime.now(timezone.utc)
    await add_project(alice, "newer", github_repo=url, github_repo_id="1", created_at=now)
    await add_project(
        alice, "older", github_repo=url, github_repo_id="1", created_at=now - timedelta(hours=1)
    )

    project = await project_queries.find_project_by_repo_url(db_session, url)

    assert project is not None and project.name == "older"


@pytest.mark.asyncio
async def test_add_collaborator_appends_once(
    session_factory: async_sessionmaker[AsyncSession],
    add_project: AddProject,
    alice: Identity,
) -> None:
    project = await add_project(alice, "p")

    async with session_factory() as session:
        updated, added = await project_queries.add_collaborator(session, project.id, "a@x.com")
    assert added is True
    assert updated.collaborators == ["alice@example.com", "a@x.com"]
    assert updated.updated_at is not None

    # the second of two racing adds sees the address under the row lock
    async with session_factory() as session:
        again, added_again = await project_queries.add_collaborator(session, project.id, "a@x.com")
    assert added_again is False
    assert again.collaborators == ["alice@example.com", "a@x.com"]


@pytest.mark.asyncio
async def test_add_collaborator_missing_project(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await project_queries.add_collaborator(db_session, uuid4(), "a@x.com")


@pytest.mark.asyncio
async def test_link_repository_sets_pair(
    db_session: AsyncSession,
    add_project: AddProject,
    alice: Identity,
) -> None:
    project = await add_project(alice, "p")

    linked = await project_queries.link_repository(
        db_session, project.id, "https://github.com/alice/p", "42"
    )

    assert linked.github_repo == "https://github.com/alice/p"
    assert linked.github_repo_id == "42"
    assert linked.updated_at is not None


@pytest.mark.asyncio
async def test_set_readme_keeps_other_fields(
    session_factory: async_sessionmaker[AsyncSession],
    add_project: AddProject,
    alice: Identity,
) -> None:
    project = await add_project(
        alice, "p", github_repo="https://github.com/alice/p", github_repo_id="42"
    )

    async with session_factory() as session:
        first = await project_queries.set_readme(session, project.id, "# v1")
    async with session_factory() as session:
        second = await project_queries.set_readme(session, project.id, "# v2")

    assert first.readme == "# v1"
    assert second.readme == "# v2"
    assert second.github_repo == "https://github.com/alice/p"
    assert second.github_repo_id == "42"


@pytest.mark.asyncio
async def test_update_project_missing_raises(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await project_queries.update_project(db_session, uuid4(), readme="x")
