"""Project model for DevCollab.

Defines the Project table together with its visibility and lifecycle
status enums.

A project is owned by exactly one profile and shared with a list of
collaborator email addresses. The list is stored on the project row and
behaves as an insertion-ordered set: the owner's email is always the
first element and no address appears twice. Collaborators are plain email
strings and need not belong to a registered profile.
"""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devcollab.database.models.base import Base, JSONList, TimestampMixin, value_enum


class ProjectVisibility(str, enum.Enum):
    """Who may read a project besides its owner and collaborators."""

    public = "public"
    private = "private"


class ProjectStatus(str, enum.Enum):
    """Lifecycle status for a project.

    States:
        active: Initial state for every new project.
        completed: Work on the project has finished.
        archived: Project kept for reference only.
    """

    active = "active"
    completed = "completed"
    archived = "archived"


class Project(TimestampMixin, Base):
    """A collaboration unit owned by one user.

    Attributes:
        id: UUID primary key assigned on creation.
        name: Human-readable project name.
        description: Free-form description (may be empty).
        visibility: Public or private.
        owner_id: uid of the owning profile, immutable.
        owner_email: Email of the owner, always present in collaborators.
        collaborators: Insertion-ordered, duplicate-free list of emails.
        tags: Free-form labels supplied at creation.
        github_repo: HTML URL of the linked GitHub repository.
        github_repo_id: GitHub id of the linked repository.
        readme: Last generated README markdown.
        status: Current lifecycle status.
        created_at: Row creation timestamp (from TimestampMixin).
        updated_at: Last modification timestamp (from TimestampMixin).
    """

    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_owner_created", "owner_id", "created_at"),
        Index("ix_projects_github_repo", "github_repo"),
        CheckConstraint(
            "(github_repo IS NULL) = (github_repo_id IS NULL)",
            name="ck_projects_repo_link_pair",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    visibility: Mapped[ProjectVisibility] = mapped_column(
        value_enum(ProjectVisibility, "project_visibility"),
        nullable=False,
        default=ProjectVisibility.private,
    )
    owner_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("profiles.uid"),
        nullable=False,
    )
    owner_email: Mapped[str] = mapped_column(Text, nullable=False)
    collaborators: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    github_repo: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_repo_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    readme: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        value_enum(ProjectStatus, "project_status"),
        nullable=False,
        default=ProjectStatus.active,
    )

    @property
    def has_repository(self) -> bool:
        """True when a GitHub repository is linked."""
        return self.github_repo is not None and self.github_repo_id is not None

    def is_owned_by(self, uid: str) -> bool:
        """Return True if the given uid owns this project."""
        return self.owner_id == uid

    def can_be_read_by(self, uid: str, email: str | None) -> bool:
        """Return True if the caller may read the project.

        Owners and collaborators may always read; anyone may read a public
        project.
        """
        if self.is_owned_by(uid) or self.visibility is ProjectVisibility.public:
            return True
        return email is not None and email in self.collaborators
