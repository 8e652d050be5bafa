"""Database layer for DevCollab.

This module handles database connections, session management, and provides
the SQLAlchemy async engine configuration.

Public API:
    get_engine: Create an AsyncEngine from DatabaseConfig.
    get_session_factory: Create an async_sessionmaker from an engine.
    create_all: Create all tables from the ORM metadata.
    Base: SQLAlchemy declarative base for all models.
"""

from devcollab.database.connection import create_all, get_engine, get_session_factory
from devcollab.database.models import (
    Base,
    Profile,
    ProfileRole,
    Project,
    ProjectStatus,
    ProjectVisibility,
    TimestampMixin,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "create_all",
    "Base",
    "TimestampMixin",
    "Profile",
    "ProfileRole",
    "Project",
    "ProjectStatus",
    "ProjectVisibility",
]
