"""Domain services for DevCollab.

Services own the rules: who may change what, which adapter is called and
in which order the store is written.
"""

from devcollab.services.notifications import NotificationService
from devcollab.services.profiles import ProfileService, default_display_name
from devcollab.services.projects import ProjectService, filter_projects
from devcollab.services.relay import PushEventRelay, RelayOutcome, format_commits

__all__ = [
    "NotificationService",
    "ProfileService",
    "ProjectService",
    "PushEventRelay",
    "RelayOutcome",
    "default_display_name",
    "filter_projects",
    "format_commits",
]
