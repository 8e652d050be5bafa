"""Adapters for the external services DevCollab depends on."""

from __future__ import annotations

from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.github import GitHubClient, GitHubRepository, sanitize_repo_name
from devcollab.integrations.mailer import Mailer, build_update_message

__all__ = [
    "GeminiClient",
    "GitHubClient",
    "GitHubRepository",
    "sanitize_repo_name",
    "Mailer",
    "build_update_message",
]
