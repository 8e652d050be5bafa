"""Change notifications for project collaborators."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from devcollab.integrations.gemini import GeminiClient
from devcollab.integrations.mailer import Mailer

logger = structlog.get_logger(__name__)


class NotificationService:
    """Summarizes changes with Gemini and mails the summary to collaborators."""

    def __init__(self, gemini: GeminiClient, mailer: Mailer) -> None:
        self.gemini = gemini
        self.mailer = mailer

    async def send_update(
        self,
        project_name: str,
        collaborators: Sequence[str],
        changes: str,
        github_repo: str | None,
    ) -> str:
        """Summarize changes and email every collaborator.

        Args:
            project_name: Name of the changed project.
            collaborators: Recipient email addresses.
            changes: Free-form description of the changes (commit lines).
            github_repo: Repository URL linked from the email, if any.

        Returns:
            The generated summary.

        Raises:
            UpstreamError: If summarization or any send fails. Sends already
                in flight are not rolled back.
        """
        summary = await self.gemini.summarize_changes(project_name, github_repo, changes)
        await self.mailer.send_project_update(project_name, collaborators, summary, github_repo)
        logger.info(
            "project_update_notified",
            project_name=project_name,
            recipient_count=len(collaborators),
        )
        return summary
