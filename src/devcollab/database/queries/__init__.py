"""Database query functions for DevCollab.

This module provides async query functions for both stored entities:
- Profile lookup, create-if-absent and field merge
- Project creation, lookup, owner listing, repository lookup and the
  single-row mutations used by the collaboration rules
"""

from devcollab.database.queries.profile import (
    create_profile_if_absent,
    get_profile,
    update_profile,
)
from devcollab.database.queries.project import (
    add_collaborator,
    create_project,
    find_project_by_repo_url,
    get_project,
    link_repository,
    list_owned_projects,
    set_readme,
    update_project,
)

__all__ = [
    # Profile queries
    "get_profile",
    "create_profile_if_absent",
    "update_profile",
    # Project queries
    "create_project",
    "get_project",
    "list_owned_projects",
    "find_project_by_repo_url",
    "add_collaborator",
    "update_project",
    "link_repository",
    "set_readme",
]
