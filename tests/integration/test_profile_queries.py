"""Integration tests for profile query functions."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devcollab.database.models import Profile, ProfileRole
from devcollab.database.queries import profile as profile_queries
from devcollab.errors import NotFoundError


@pytest.mark.asyncio
async def test_create_profile_if_absent_inserts(db_session: AsyncSession) -> None:
    profile, created = await profile_queries.create_profile_if_absent(
        db_session,
        uid="u1",
        email="jane@x.com",
        display_name="jane",
    )

    assert created is True
    assert profile.uid == "u1"
    assert profile.display_name == "jane"
    assert profile.role is None
    assert profile.created_at is not None
    assert profile.updated_at is None


@pytest.mark.asyncio
async def test_create_profile_if_absent_returns_existing(db_session: AsyncSession) -> None:
    await profile_queries.create_profile_if_absent(db_session, "u1", "jane@x.com", "jane")

    profile, created = await profile_queries.create_profile_if_absent(
        db_session, "u1", "jane@x.com", "Someone Else"
    )

    assert created is False
    assert profile.display_name == "jane"


@pytest.mark.asyncio
async def test_create_profile_race_loser_reads_winner(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """A request that misses the existing row on read hits the primary key on insert."""
    async with session_factory() as session:
        winner, _ = await profile_queries.create_profile_if_absent(
            session, "u1", "jane@x.com", "jane"
        )

    real_get_profile = profile_queries.get_profile
    lookups = AsyncMock(side_effect=[None, winner])

    async with session_factory() as session:
        with patch.object(profile_queries, "get_profile", lookups):
            profile, created = await profile_queries.create_profile_if_absent(
                session, "u1", "jane@x.com", "loser"
            )

    assert created is False
    assert profile.display_name == "jane"
    assert lookups.await_count == 2

    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(Profile))
        stored = await real_get_profile(session, "u1")
    assert count == 1
    assert stored is not None and stored.display_name == "jane"


@pytest.mark.asyncio
async def test_update_profile_sets_fields_and_updated_at(db_session: AsyncSession) -> None:
    await profile_queries.create_profile_if_absent(db_session, "u1", "jane@x.com", "jane")

    profile = await profile_queries.update_profile(
        db_session, "u1", role=ProfileRole.project_manager
    )

    assert profile.role is ProfileRole.project_manager
    assert profile.display_name == "jane"
    assert profile.updated_at is not None


@pytest.mark.asyncio
async def test_update_profile_missing_raises(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await profile_queries.update_profile(db_session, "nobody", display_name="x")


@pytest.mark.asyncio
async def test_get_profile_missing_returns_none(db_session: AsyncSession) -> None:
    assert await profile_queries.get_profile(db_session, "nobody") is None
