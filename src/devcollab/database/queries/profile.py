"""Profile query functions for DevCollab.

Provides async functions for reading, conditionally creating and updating
Profile records using the SQLAlchemy 2.0 select() API.

Each write function owns its transaction and must be called on a session
that has no transaction in progress.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devcollab.database.models.profile import Profile
from devcollab.errors import NotFoundError

logger = structlog.get_logger(__name__)


async def get_profile(
    session: AsyncSession,
    uid: str,
) -> Profile | None:
    """Retrieve a profile by uid.

    Args:
        session: Active async database session.
        uid: Identity provider user id.

    Returns:
        The Profile instance if found, None otherwise.
    """
    stmt = (
        select(Profile)
        .where(Profile.uid == uid)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_profile_if_absent(
    session: AsyncSession,
    uid: str,
    email: str,
    display_name: str,
    photo_url: str | None = None,
) -> tuple[Profile, bool]:
    """Insert a profile keyed by uid unless one already exists.

    The insert is a single statement guarded by the primary key, so two
    concurrent first sign-ins for the same uid produce one row: the loser
    of the race gets an IntegrityError, rolls back and reads the winner's
    row.

    Args:
        session: Async database session with no transaction in progress.
        uid: Identity provider user id.
        email: Email claim of the identity.
        display_name: Display name to store on creation.
        photo_url: Optional avatar URL.

    Returns:
        Tuple of (profile, created) where created is False if the profile
        already existed.
    """
    async with session.begin():
        existing = await get_profile(session, uid)
    if existing is not None:
        return existing, False

    profile = Profile(
        uid=uid,
        email=email,
        display_name=display_name,
        photo_url=photo_url,
    )

    try:
        async with session.begin():
            session.add(profile)
            await session.flush()
            await session.refresh(profile)
    except IntegrityError:
        logger.info("profile_create_race_lost", uid=uid)
        winner = await get_profile(session, uid)
        if winner is None:
            raise
        return winner, False

    logger.info("profile_created", uid=uid, email=email)
    return profile, True


async def update_profile(
    session: AsyncSession,
    uid: str,
    **updates: Any,
) -> Profile:
    """Merge fields into a profile and stamp updated_at.

    Args:
        session: Async database session with no transaction in progress.
        uid: Identity provider user id.
        **updates: Column names and values to merge.

    Returns:
        The updated Profile instance.

    Raises:
        NotFoundError: If no profile exists for uid.
    """
    async with session.begin():
        stmt = (
            update(Profile)
            .where(Profile.uid == uid)
            .values(**updates, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)

    if result.rowcount == 0:
        raise NotFoundError(f"Profile {uid} not found")

    profile = await get_profile(session, uid)
    if profile is None:
        raise NotFoundError(f"Profile {uid} not found")

    logger.info(
        "profile_updated",
        uid=uid,
        fields_updated=list(updates.keys()),
    )
    return profile
