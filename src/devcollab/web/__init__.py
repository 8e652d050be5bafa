"""Web API for DevCollab."""

from devcollab.web.app import create_app

__all__ = ["create_app"]
