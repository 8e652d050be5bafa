"""Initial schema for DevCollab.

Creates the profiles and projects tables. Enums are stored as constrained
strings holding the wire values (for example ``project-manager``).

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_LIST = sa.JSON().with_variant(JSONB(), "postgresql")

PROFILE_ROLES = ("developer", "project-manager", "product-manager", "designer", "other")
PROJECT_VISIBILITIES = ("public", "private")
PROJECT_STATUSES = ("active", "completed", "archived")


def _string_enum(values: Sequence[str], name: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("uid", sa.String(128), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("role", _string_enum(PROFILE_ROLES, "profile_role"), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "visibility",
            _string_enum(PROJECT_VISIBILITIES, "project_visibility"),
            nullable=False,
            server_default="private",
        ),
        sa.Column("owner_id", sa.String(128), sa.ForeignKey("profiles.uid"), nullable=False),
        sa.Column("owner_email", sa.Text(), nullable=False),
        sa.Column("collaborators", JSON_LIST, nullable=False),
        sa.Column("tags", JSON_LIST, nullable=False),
        sa.Column("github_repo", sa.Text(), nullable=True),
        sa.Column("github_repo_id", sa.Text(), nullable=True),
        sa.Column("readme", sa.Text(), nullable=True),
        sa.Column(
            "status",
            _string_enum(PROJECT_STATUSES, "project_status"),
            nullable=False,
            server_default="active",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "(github_repo IS NULL) = (github_repo_id IS NULL)",
            name="ck_projects_repo_link_pair",
        ),
    )

    op.create_index("ix_projects_owner_created", "projects", ["owner_id", "created_at"])
    op.create_index("ix_projects_github_repo", "projects", ["github_repo"])


def downgrade() -> None:
    op.drop_index("ix_projects_github_repo", table_name="projects")
    op.drop_index("ix_projects_owner_created", table_name="projects")
    op.drop_table("projects")
    op.drop_table("profiles")
