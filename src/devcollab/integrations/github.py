"""GitHub REST API client for repository creation.

Creates a repository under the account that owns the configured token. The
client is constructed once at application startup and shared by every
request; the underlying httpx.AsyncClient is created lazily and closed on
shutdown.

No retries are attempted: a failed call surfaces as an UpstreamError
carrying GitHub's status code and message.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from devcollab.config import GitHubConfig
from devcollab.errors import InvalidInputError, UpstreamError
from devcollab.logging import get_logger

logger = get_logger(__name__)

_INVALID_REPO_CHARS = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-+")


def sanitize_repo_name(name: str) -> str:
    """Derive a GitHub repository name from a project name.

    Lowercases the name, replaces every character outside ``[a-z0-9-]``
    with a hyphen, collapses runs of hyphens and strips hyphens from both
    ends.

    >>> sanitize_repo_name("My Cool App!!")
    'my-cool-app'
    """
    slug = _INVALID_REPO_CHARS.sub("-", name.lower())
    return _HYPHEN_RUNS.sub("-", slug).strip("-")


@dataclass
class GitHubRepository:
    """Subset of the GitHub repository resource returned to callers."""

    id: int
    name: str
    full_name: str
    html_url: str
    description: str | None
    private: bool
    created_at: str | None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GitHubRepository:
        """Build from a GitHub API repository payload."""
        return cls(
            id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            html_url=data["html_url"],
            description=data.get("description"),
            private=data.get("private", True),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


class GitHubClient:
    """Async client for the GitHub repository API."""

    def __init__(self, config: GitHubConfig) -> None:
        self.config = config
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.config.user_agent,
        }

    async def create_repository(
        self,
        name: str,
        description: str | None = None,
        private: bool = True,
    ) -> GitHubRepository:
        """Create a repository named after the sanitized project name.

        Args:
            name: Project name; sanitized with sanitize_repo_name.
            description: Repository description. Defaults to
                "DevCollab project: <name>".
            private: Create a private repository.

        Returns:
            The created repository.

        Raises:
            InvalidInputError: If name is empty or has no usable characters.
            UpstreamError: If the token is missing, GitHub rejects the
                request, or GitHub cannot be reached.
        """
        if not name or not name.strip():
            raise InvalidInputError("Project name is required")
        if not self.config.token:
            raise UpstreamError.missing_credential("GitHub", "DEVCOLLAB_GITHUB__TOKEN")

        repo_name = sanitize_repo_name(name)
        if not repo_name:
            raise InvalidInputError(
                f"Project name {name!r} has no characters usable in a repository name"
            )

        body = {
            "name": repo_name,
            "description": description or f"DevCollab project: {name}",
            "private": private,
            "auto_init": True,
            "gitignore_template": self.config.gitignore_template,
            "license_template": self.config.license_template,
        }

        client = await self._get_client()
        try:
            response = await client.post("/user/repos", json=body, headers=self._headers())
        except httpx.RequestError as e:
            logger.error("github_request_error", repo_name=repo_name, error=str(e))
            raise UpstreamError(
                f"Failed to reach GitHub: {e}",
                service="GitHub",
            ) from e

        if not response.is_success:
            message = "Failed to create repository"
            try:
                message = response.json().get("message") or message
            except ValueError:
                pass
            logger.warning(
                "github_repository_create_failed",
                repo_name=repo_name,
                status_code=response.status_code,
                message=message,
            )
            raise UpstreamError(
                message,
                service="GitHub",
                upstream_status=response.status_code,
            )

        repository = GitHubRepository.from_api(response.json())
        logger.info(
            "github_repository_created",
            repo_name=repository.full_name,
            repo_id=repository.id,
            private=repository.private,
        )
        return repository
