"""Profile lifecycle service.

A profile is created transparently the first time a verified identity
reaches the API and is never deleted. Afterwards only the display name and
role change.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devcollab.auth import Identity
from devcollab.database.models.profile import Profile, ProfileRole
from devcollab.database.queries import profile as profile_queries
from devcollab.errors import InvalidInputError, NotFoundError

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]


def default_display_name(identity: Identity) -> str:
    """Display name for a new profile: the name claim, else the email local part."""
    if identity.display_name and identity.display_name.strip():
        return identity.display_name.strip()
    return identity.email.split("@", 1)[0]


class ProfileService:
    """Reads and mutates user profiles.

    Attributes:
        session_factory: Callable that produces async database sessions.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def get_or_create_profile(self, identity: Identity) -> Profile:
        """Return the caller's profile, creating it on first sign-in.

        Args:
            identity: Verified identity of the caller.

        Returns:
            The stored profile.
        """
        async with self.session_factory() as session:
            profile, created = await profile_queries.create_profile_if_absent(
                session,
                uid=identity.uid,
                email=identity.email,
                display_name=default_display_name(identity),
                photo_url=identity.photo_url,
            )

        if created:
            logger.info("profile_signed_up", uid=identity.uid)
        return profile

    async def get_profile(self, uid: str) -> Profile:
        """Return a profile.

        Raises:
            NotFoundError: If no profile exists for uid.
        """
        async with self.session_factory() as session:
            profile = await profile_queries.get_profile(session, uid)
        if profile is None:
            raise NotFoundError(f"Profile {uid} not found")
        return profile

    async def set_role(self, uid: str, role: ProfileRole) -> Profile:
        """Set the caller's role.

        Raises:
            NotFoundError: If no profile exists for uid.
        """
        async with self.session_factory() as session:
            return await profile_queries.update_profile(session, uid, role=role)

    async def update_profile(
        self,
        uid: str,
        display_name: str | None = None,
        role: ProfileRole | None = None,
    ) -> Profile:
        """Edit display name and/or role in one write.

        Fields left as None are not changed. With nothing to change the
        stored profile is returned as is.

        Raises:
            InvalidInputError: If display_name is blank.
            NotFoundError: If no profile exists for uid.
        """
        updates: dict[str, Any] = {}
        if display_name is not None:
            display_name = display_name.strip()
            if not display_name:
                raise InvalidInputError("Display name must not be empty")
            updates["display_name"] = display_name
        if role is not None:
            updates["role"] = role

        if not updates:
            return await self.get_profile(uid)

        async with self.session_factory() as session:
            return await profile_queries.update_profile(session, uid, **updates)
