"""API routers for DevCollab."""

from devcollab.web.routes.health import create_health_router
from devcollab.web.routes.integrations import (
    create_ai_router,
    create_github_router,
    create_notifications_router,
)
from devcollab.web.routes.profiles import create_profiles_router
from devcollab.web.routes.projects import create_projects_router
from devcollab.web.routes.webhooks import create_webhooks_router

__all__ = [
    "create_ai_router",
    "create_github_router",
    "create_health_router",
    "create_notifications_router",
    "create_profiles_router",
    "create_projects_router",
    "create_webhooks_router",
]
