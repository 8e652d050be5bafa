"""SQLAlchemy declarative base and common column mixins for DevCollab.

This module defines the DeclarativeBase class, a TimestampMixin that
provides the server-assigned created_at column and the mutation-only
updated_at column shared by profiles and projects, and the column types
used for list-valued document fields.

Example:
    >>> class MyModel(TimestampMixin, Base):
    ...     __tablename__ = "my_table"
    ...     name: Mapped[str] = mapped_column(Text, nullable=False)
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


def value_enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    """Column type storing an Enum by its value rather than its member name.

    Values such as ``project-manager`` are not valid Python identifiers, so
    the stored representation follows the wire values.
    """
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base for all DevCollab models."""

    pass


class TimestampMixin:
    """Mixin providing created_at and updated_at columns.

    This mixin should be listed before Base in the class hierarchy
    to ensure the columns are included in the model's table definition.

    Attributes:
        created_at: Timestamp set by the database on row creation.
        updated_at: Null on creation; set by the database on each mutation.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        onupdate=func.now(),
    )
