"""GitHub push event relay.

Maps an inbound push event to the project linked to the pushed repository
and notifies that project's collaborators. Pushes to branches other than
the configured primary branches, and pushes to repositories no project is
linked to, are discarded without notifying anyone. The relay never writes
to the project store.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from devcollab.database.queries.project import find_project_by_repo_url
from devcollab.logging import bind_project_context
from devcollab.services.notifications import NotificationService

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]

NOT_PRIMARY_BRANCH = "Not a main branch push"
PROJECT_NOT_FOUND = "Project not found"


@dataclass(frozen=True)
class RelayOutcome:
    """Result of relaying one push event.

    Attributes:
        notified: True when collaborators were emailed.
        message: Why the event was discarded, when it was.
    """

    notified: bool
    message: str | None = None


def format_commits(commits: Iterable[Mapping[str, Any]]) -> str:
    """Render push commits as ``"<author>: <message>"`` lines."""
    lines = []
    for commit in commits:
        author = (commit.get("author") or {}).get("name") or "unknown"
        lines.append(f"{author}: {commit.get('message', '')}")
    return "\n".join(lines)


class PushEventRelay:
    """Relays primary-branch pushes to collaborator notifications.

    Attributes:
        session_factory: Callable that produces async database sessions.
        notifications: Service that summarizes and mails the changes.
        primary_branches: Branch names whose pushes are relayed.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        notifications: NotificationService,
        primary_branches: Sequence[str] = ("main", "master"),
    ) -> None:
        self.session_factory = session_factory
        self.notifications = notifications
        self.primary_refs = {f"refs/heads/{branch}" for branch in primary_branches}

    async def handle_push(self, payload: Mapping[str, Any]) -> RelayOutcome:
        """Relay one push event payload.

        Args:
            payload: Decoded GitHub push event body.

        Returns:
            Whether collaborators were notified, and if not, why.

        Raises:
            UpstreamError: If summarization or sending fails.
        """
        ref = payload.get("ref")
        if ref not in self.primary_refs:
            logger.info("push_event_ignored", reason="branch", ref=ref)
            return RelayOutcome(notified=False, message=NOT_PRIMARY_BRANCH)

        repo_url = (payload.get("repository") or {}).get("html_url")
        project = None
        if repo_url:
            async with self.session_factory() as session:
                project = await find_project_by_repo_url(session, repo_url)
        if project is None:
            logger.info("push_event_ignored", reason="unknown_repository", repo_url=repo_url)
            return RelayOutcome(notified=False, message=PROJECT_NOT_FOUND)

        bind_project_context(project.id)
        commits = payload.get("commits") or []
        logger.info(
            "push_event_relayed",
            project_id=str(project.id),
            ref=ref,
            commit_count=len(commits),
        )
        await self.notifications.send_update(
            project.name,
            list(project.collaborators),
            format_commits(commits),
            project.github_repo,
        )
        return RelayOutcome(notified=True)
