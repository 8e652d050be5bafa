"""SQLAlchemy ORM models for DevCollab.

This module defines the database schema: user profiles keyed by identity
provider uid and projects keyed by UUID.

All models use SQLAlchemy 2.0 declarative style with Mapped[] type annotations.
"""

from devcollab.database.models.base import Base, TimestampMixin
from devcollab.database.models.profile import Profile, ProfileRole
from devcollab.database.models.project import Project, ProjectStatus, ProjectVisibility

__all__ = [
    "Base",
    "TimestampMixin",
    "Profile",
    "ProfileRole",
    "Project",
    "ProjectStatus",
    "ProjectVisibility",
]
