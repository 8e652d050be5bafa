"""Request and response schemas for the DevCollab JSON API.

Field names are snake_case in Python and camelCase on the wire. Requests
accept either spelling.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from devcollab.database.models.profile import ProfileRole
from devcollab.database.models.project import ProjectStatus, ProjectVisibility


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ProfileResponse(CamelModel):
    """Response schema for profile data.

    Attributes:
        uid: Identity provider user id
        email: Email address
        display_name: Display name
        photo_url: Avatar URL
        role: Self-declared role
        created_at: Creation timestamp
        updated_at: Last modification timestamp (None until first edit)
    """

    uid: str
    email: str
    display_name: str
    photo_url: str | None
    role: ProfileRole | None
    created_at: datetime
    updated_at: datetime | None


class ProfileUpdate(CamelModel):
    """Request schema for editing a profile. Omitted fields are unchanged."""

    display_name: str | None = None
    role: ProfileRole | None = None


class RoleUpdate(CamelModel):
    role: ProfileRole


class ProjectCreate(CamelModel):
    """Request schema for creating a project.

    Attributes:
        name: Project name (required, trimmed)
        description: Free-form description
        visibility: public or private
        tags: Free-form labels
    """

    name: str = Field(..., max_length=255)
    description: str = ""
    visibility: ProjectVisibility = ProjectVisibility.private
    tags: list[str] = Field(default_factory=list)


class ProjectResponse(CamelModel):
    """Response schema for project data."""

    id: UUID
    name: str
    description: str
    visibility: ProjectVisibility
    owner_id: str
    owner_email: str
    collaborators: list[str]
    tags: list[str]
    github_repo: str | None
    github_repo_id: str | None
    readme: str | None
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime | None


class CollaboratorAdd(CamelModel):
    email: str


class ShareLinkResponse(CamelModel):
    url: str


class GenerateReadmeRequest(CamelModel):
    """Request schema for the stand-alone README generator."""

    project_name: str | None = None
    description: str | None = None
    github_repo: str | None = None
    project_type: str = "web"


class GenerateReadmeResponse(CamelModel):
    readme: str
    generated_at: datetime


class CreateRepoRequest(BaseModel):
    """Request schema for the stand-alone repository creator."""

    name: str | None = None
    description: str | None = None
    private: bool = True


class RepositoryResponse(BaseModel):
    """GitHub repository fields, named as GitHub names them."""

    id: int
    name: str
    full_name: str
    html_url: str
    description: str | None
    private: bool
    created_at: str | None


class SendUpdateRequest(CamelModel):
    """Request schema for the collaborator notification endpoint."""

    project_name: str
    collaborators: list[str]
    changes: str
    github_repo: str | None = None


class SendUpdateResponse(CamelModel):
    success: bool
    summary: str

