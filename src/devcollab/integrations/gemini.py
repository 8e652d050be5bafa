"""Gemini API client for README generation and change summaries.

This module provides an async HTTP client for the Gemini generateContent
endpoint of the Google generative language REST API. Two prompts are
supported: a full README.md for a project, and a short summary of pushed
commits for the collaborator notification email.

Example usage:
    >>> from devcollab.config import GeminiConfig
    >>> client = GeminiClient(GeminiConfig(api_key="..."))
    >>> readme = await client.generate_readme("DevCollab", "Team tool", None)
    >>> await client.close()
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from devcollab.config import GeminiConfig
from devcollab.errors import UpstreamError

logger = structlog.get_logger(__name__)

README_PROMPT = """Generate a comprehensive and professional README.md file for a {project_type} project with the following details:

Project Name: {project_name}
Description: {description}
GitHub Repository: {github_repo}

Please create a well-structured README that includes:

1. # {project_name}
2. A compelling project description
3. ## Features (list key features based on the description)
4. ## Installation
   - Prerequisites
   - Step-by-step installation instructions
5. ## Usage
   - Basic usage examples
   - Code snippets if applicable
6. ## API Documentation (if applicable)
7. ## Contributing
   - How to contribute
   - Code of conduct
8. ## License
9. ## Contact/Support

Make it professional, well-formatted in Markdown, and include relevant badges. Assume this is a collaborative project and make the content engaging and informative.

Focus on making it practical and useful for developers who want to understand and contribute to the project."""

SUMMARY_PROMPT = """Analyze the following code changes and provide a concise summary for team members:

Project: {project_name}
Repository: {github_repo}
Changes:
{changes}

Please provide:
1. A brief summary of what was changed
2. Impact on the project
3. Any important notes for collaborators

Keep it professional and easy to understand."""


class GeminiClient:
    """Async client for the Gemini generateContent API.

    Attributes:
        config: Gemini configuration containing API key, model and timeout
    """

    def __init__(self, config: GeminiConfig) -> None:
        self.config = config
        self._client: httpx.AsyncClient | None = None
        logger.info(
            "gemini_client_initialized",
            model=config.model,
            configured=config.api_key is not None,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def generate_text(self, prompt: str) -> str:
        """Send a single-turn prompt and return the generated text.

        Args:
            prompt: Prompt text

        Returns:
            Concatenated text of the first candidate

        Raises:
            UpstreamError: If the API key is missing, the API returns an
                error, the response holds no text, or the API is unreachable
        """
        if not self.config.api_key:
            raise UpstreamError.missing_credential("Gemini", "DEVCOLLAB_GEMINI__API_KEY")

        client = await self._get_client()
        endpoint = f"/models/{self.config.model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        try:
            response = await client.post(
                endpoint,
                json=payload,
                headers={"x-goog-api-key": self.config.api_key},
            )
        except httpx.TimeoutException as e:
            logger.error("gemini_timeout", timeout_seconds=self.config.timeout_seconds)
            raise UpstreamError("Gemini request timed out", service="Gemini") from e
        except httpx.RequestError as e:
            logger.error("gemini_connection_error", error=str(e))
            raise UpstreamError(f"Failed to reach Gemini: {e}", service="Gemini") from e

        if not response.is_success:
            logger.warning(
                "gemini_api_error",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise UpstreamError(
                f"Gemini API error: HTTP {response.status_code}",
                service="Gemini",
                upstream_status=response.status_code,
            )

        text = _extract_text(response.json())
        if not text:
            raise UpstreamError("No content generated", service="Gemini")

        logger.info(
            "gemini_text_generated",
            model=self.config.model,
            prompt_length=len(prompt),
            output_length=len(text),
        )
        return text

    async def generate_readme(
        self,
        project_name: str,
        description: str | None,
        github_repo: str | None,
        project_type: str = "web",
    ) -> str:
        """Generate README.md markdown for a project."""
        prompt = README_PROMPT.format(
            project_type=project_type,
            project_name=project_name,
            description=description or "No description provided",
            github_repo=github_repo or "Not specified",
        )
        return await self.generate_text(prompt)

    async def summarize_changes(
        self,
        project_name: str,
        github_repo: str | None,
        changes: str,
    ) -> str:
        """Summarize pushed commits for the collaborator notification."""
        prompt = SUMMARY_PROMPT.format(
            project_name=project_name,
            github_repo=github_repo or "Not specified",
            changes=changes,
        )
        return await self.generate_text(prompt)


def _extract_text(data: dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts).strip()
