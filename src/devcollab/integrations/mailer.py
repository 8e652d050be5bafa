"""SMTP mailer for collaborator update notifications.

Messages are sent with aiosmtplib, one SMTP session per message. A project
update fans out one message per collaborator concurrently; the first
failed send propagates and no per-recipient outcome is recorded.
"""

from __future__ import annotations

import asyncio
import html
from collections.abc import Sequence
from email.message import EmailMessage

import aiosmtplib

from devcollab.config import MailConfig
from devcollab.errors import UpstreamError
from devcollab.logging import get_logger

logger = get_logger(__name__)

_UPDATE_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">DevCollab - Project Update</h2>
  <h3>{project_name}</h3>
  <p>New changes have been made to your project. Here's a summary:</p>
  <div style="background-color: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <pre style="white-space: pre-wrap; font-family: inherit;">{summary}</pre>
  </div>
  <p><a href="{github_repo}" style="color: #2563eb; text-decoration: none;">View on GitHub &rarr;</a></p>
  <hr style="margin: 30px 0; border: none; border-top: 1px solid #e2e8f0;">
  <p style="color: #64748b; font-size: 14px;">
    This email was sent by DevCollab. You're receiving this because you're a collaborator on this project.
  </p>
</div>
"""


def build_update_message(
    sender: str,
    recipient: str,
    project_name: str,
    summary: str,
    github_repo: str | None,
) -> EmailMessage:
    """Build the multipart update email for one collaborator."""
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = f"{project_name} - New Updates Available"

    repo_line = f"\n\nView on GitHub: {github_repo}" if github_repo else ""
    message.set_content(
        f"New changes have been made to {project_name}. Here's a summary:\n\n"
        f"{summary}{repo_line}\n"
    )
    message.add_alternative(
        _UPDATE_HTML.format(
            project_name=html.escape(project_name),
            summary=html.escape(summary),
            github_repo=html.escape(github_repo or "", quote=True),
        ),
        subtype="html",
    )
    return message


class Mailer:
    """Sends notification emails through the configured SMTP relay."""

    def __init__(self, config: MailConfig) -> None:
        self.config = config

    @property
    def sender(self) -> str | None:
        return self.config.sender or self.config.username

    def _require_credentials(self) -> None:
        if not self.config.username or not self.config.password:
            raise UpstreamError.missing_credential(
                "Mail",
                "DEVCOLLAB_MAIL__USERNAME and DEVCOLLAB_MAIL__PASSWORD",
            )

    async def send(self, message: EmailMessage) -> None:
        """Send one message.

        Raises:
            UpstreamError: If credentials are missing or the relay rejects
                the message.
        """
        self._require_credentials()
        try:
            await aiosmtplib.send(
                message,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.password,
                start_tls=self.config.start_tls,
                timeout=self.config.timeout_seconds,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("mail_send_failed", to=message["To"], error=str(e))
            raise UpstreamError(f"Failed to send email: {e}", service="Mail") from e

        logger.info("mail_sent", to=message["To"], subject=message["Subject"])

    async def send_project_update(
        self,
        project_name: str,
        recipients: Sequence[str],
        summary: str,
        github_repo: str | None,
    ) -> None:
        """Send the update summary to every recipient concurrently.

        Raises:
            UpstreamError: From the first send that fails.
        """
        self._require_credentials()
        sender = self.sender or ""

        messages = [
            build_update_message(sender, recipient, project_name, summary, github_repo)
            for recipient in recipients
        ]
        logger.info(
            "project_update_dispatch",
            project_name=project_name,
            recipient_count=len(messages),
        )
        await asyncio.gather(*(self.send(message) for message in messages))
