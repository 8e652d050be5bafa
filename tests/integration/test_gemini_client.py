"""Integration tests for the Gemini text generation client."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from devcollab.config import GeminiConfig
from devcollab.errors import UpstreamError, UpstreamErrorKind
from devcollab.integrations.gemini import GeminiClient

API = "https://gemini.test/v1beta"
GENERATE_URL = f"{API}/models/gemini-1.5-flash:generateContent"


@pytest.fixture
def config() -> GeminiConfig:
    return GeminiConfig(api_key="key-123", api_url=API)


def reply(*parts: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={"candidates": [{"content": {"role": "model", "parts": [{"text": p} for p in parts]}}]},
    )


@respx.mock
@pytest.mark.asyncio
async def test_generate_text_request_and_response(config: GeminiConfig) -> None:
    route = respx.post(GENERATE_URL).mock(return_value=reply("# Title\n", "Body"))
    client = GeminiClient(config)

    text = await client.generate_text("Write a README")
    await client.close()

    request = route.calls.last.request
    assert request.headers["x-goog-api-key"] == "key-123"
    assert json.loads(request.content) == {
        "contents": [{"role": "user", "parts": [{"text": "Write a README"}]}]
    }
    assert text == "# Title\nBody"


@respx.mock
@pytest.mark.asyncio
async def test_generate_readme_prompt(config: GeminiConfig) -> None:
    route = respx.post(GENERATE_URL).mock(return_value=reply("# DevCollab"))
    client = GeminiClient(config)

    await client.generate_readme("DevCollab", None, None, project_type="api")
    await client.close()

    prompt = json.loads(route.calls.last.request.content)["contents"][0]["parts"][0]["text"]
    assert "for a api project" in prompt
    assert "Project Name: DevCollab" in prompt
    assert "Description: No description provided" in prompt
    assert "GitHub Repository: Not specified" in prompt


@respx.mock
@pytest.mark.asyncio
async def test_summarize_changes_prompt(config: GeminiConfig) -> None:
    route = respx.post(GENERATE_URL).mock(return_value=reply("Summary"))
    client = GeminiClient(config)

    summary = await client.summarize_changes(
        "DevCollab", "https://github.com/a/b", "Alice: Add login"
    )
    await client.close()

    prompt = json.loads(route.calls.last.request.content)["contents"][0]["parts"][0]["text"]
    assert "Repository: https://github.com/a/b" in prompt
    assert "Alice: Add login" in prompt
    assert summary == "Summary"


@respx.mock
@pytest.mark.asyncio
async def test_empty_candidates_is_error(config: GeminiConfig) -> None:
    respx.post(GENERATE_URL).mock(return_value=httpx.Response(200, json={"candidates": []}))
    client = GeminiClient(config)

    with pytest.raises(UpstreamError, match="No content generated"):
        await client.generate_text("x")
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_api_error_carries_status(config: GeminiConfig) -> None:
    respx.post(GENERATE_URL).mock(return_value=httpx.Response(429, json={"error": {}}))
    client = GeminiClient(config)

    with pytest.raises(UpstreamError) as exc_info:
        await client.generate_text("x")
    await client.close()

    assert exc_info.value.upstream_status == 429


@respx.mock
@pytest.mark.asyncio
async def test_timeout_is_upstream_error(config: GeminiConfig) -> None:
    respx.post(GENERATE_URL).mock(side_effect=httpx.ReadTimeout("slow"))
    client = GeminiClient(config)

    with pytest.raises(UpstreamError, match="timed out"):
        await client.generate_text("x")
    await client.close()


@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error() -> None:
    client = GeminiClient(GeminiConfig(api_key=None, api_url=API))

    with pytest.raises(UpstreamError) as exc_info:
        await client.generate_text("x")

    assert exc_info.value.kind is UpstreamErrorKind.CONFIGURATION
