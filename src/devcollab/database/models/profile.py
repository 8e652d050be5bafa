"""User profile model for DevCollab.

One row per identity provider user, keyed by the provider's uid. Rows are
created transparently on first sign-in and never deleted by the service.
"""

from __future__ import annotations

import enum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from devcollab.database.models.base import Base, TimestampMixin, value_enum


class ProfileRole(str, enum.Enum):
    """Self-declared role of a user within their team."""

    developer = "developer"
    project_manager = "project-manager"
    product_manager = "product-manager"
    designer = "designer"
    other = "other"


class Profile(TimestampMixin, Base):
    """A DevCollab user account record.

    Attributes:
        uid: Opaque identity provider user id (primary key, immutable).
        email: Email address from the identity provider, immutable once set.
        display_name: Name shown to collaborators.
        photo_url: Optional avatar URL from the identity provider.
        role: Optional self-declared role.
        created_at: Row creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "profiles"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[ProfileRole | None] = mapped_column(
        value_enum(ProfileRole, "profile_role"),
        nullable=True,
    )
