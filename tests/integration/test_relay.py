"""Integration tests for the push event relay and notification service."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
import respx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from devcollab.auth import Identity
from devcollab.errors import UpstreamError
from devcollab.services.notifications import NotificationService
from devcollab.services.relay import (
    NOT_PRIMARY_BRANCH,
    PROJECT_NOT_FOUND,
    PushEventRelay,
)

GENERATE_URL = "https://gemini.test/v1beta/models/gemini-1.5-flash:generateContent"
REPO_URL = "https://github.com/alice/devcollab"


def push_payload(ref: str = "refs/heads/main", repo_url: str = REPO_URL) -> dict[str, Any]:
    return {
        "ref": ref,
        "repository": {"html_url": repo_url, "full_name": "alice/devcollab"},
        "commits": [
            {"message": "Add login page", "author": {"name": "Alice"}},
            {"message": "Fix typo", "author": {"name": "Bob"}},
        ],
    }


@pytest_asyncio.fixture(autouse=True)
async def profiles(add_profile: Callable[..., Awaitable[Any]], alice: Identity) -> None:
    await add_profile(alice)


@pytest.fixture
def relay(
    session_factory: async_sessionmaker[AsyncSession],
    notification_service: NotificationService,
) -> PushEventRelay:
    return PushEventRelay(session_factory, notification_service, primary_branches=["main", "master"])


@pytest.mark.parametrize("ref", ["refs/heads/develop", "refs/tags/v1.0", "refs/heads/main-old", None])
@pytest.mark.asyncio
async def test_non_primary_branch_discarded(
    relay: PushEventRelay,
    mailer: AsyncMock,
    add_project: Callable[..., Awaitable[Any]],
    alice: Identity,
    ref: str | None,
) -> None:
    await add_project(alice, "devcollab", github_repo=REPO_URL, github_repo_id="1")

    outcome = await relay.handle_push(push_payload(ref=ref))  # type: ignore[arg-type]

    assert outcome.notified is False
    assert outcome.message == NOT_PRIMARY_BRANCH
    mailer.send_project_update.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_repository_discarded(relay: PushEventRelay, mailer: AsyncMock) -> None:
    outcome = await relay.handle_push(push_payload(repo_url="https://github.com/nobody/else"))

    assert outcome.notified is False
    assert outcome.message == PROJECT_NOT_FOUND
    mailer.send_project_update.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_repository_discarded(relay: PushEventRelay, mailer: AsyncMock) -> None:
    outcome = await relay.handle_push({"ref": "refs/heads/main", "commits": []})

    assert outcome.message == PROJECT_NOT_FOUND
    mailer.send_project_update.assert_not_awaited()


@respx.mock
@pytest.mark.parametrize("branch", ["main", "master"])
@pytest.mark.asyncio
async def test_primary_branch_push_notifies_collaborators(
    relay: PushEventRelay,
    mailer: AsyncMock,
    add_project: Callable[..., Awaitable[Any]],
    alice: Identity,
    branch: str,
) -> None:
    gemini = respx.post(GENERATE_URL).mock(
        return_value=httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "Login page added."}]}}]}
        )
    )
    await add_project(
        alice,
        "DevCollab",
        github_repo=REPO_URL,
        github_repo_id="1",
        collaborators=[alice.email, "bob@example.com"],
    )

    outcome = await relay.handle_push(push_payload(ref=f"refs/heads/{branch}"))

    assert outcome.notified is True
    prompt = gemini.calls.last.request.content.decode()
    assert "Alice: Add login page\\nBob: Fix typo" in prompt
    mailer.send_project_update.assert_awaited_once_with(
        "DevCollab",
        [alice.email, "bob@example.com"],
        "Login page added.",
        REPO_URL,
    )


@respx.mock
@pytest.mark.asyncio
async def test_duplicate_link_notifies_oldest_project(
    relay: PushEventRelay,
    mailer: AsyncMock,
    add_project: Callable[..., Awaitable[Any]],
    alice: Identity,
) -> None:
    respx.post(GENERATE_URL).mock(
        return_value=httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "s"}]}}]})
    )
    now = datetime.now(timezone.utc)
    await add_project(alice, "newer", github_repo=REPO_URL, github_repo_id="1", created_at=now)
    await add_project(
        alice, "older", github_repo=REPO_URL, github_repo_id="1", created_at=now - timedelta(days=1)
    )

    await relay.handle_push(push_payload())

    assert mailer.send_project_update.await_args.args[0] == "older"


@respx.mock
@pytest.mark.asyncio
async def test_send_failure_propagates(
    relay: PushEventRelay,
    mailer: AsyncMock,
    add_project: Callable[..., Awaitable[Any]],
    alice: Identity,
) -> None:
    respx.post(GENERATE_URL).mock(
        return_value=httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "s"}]}}]})
    )
    mailer.send_project_update.side_effect = UpstreamError("relay refused", service="Mail")
    await add_project(alice, "p", github_repo=REPO_URL, github_repo_id="1")

    with pytest.raises(UpstreamError):
        await relay.handle_push(push_payload())


@respx.mock
@pytest.mark.asyncio
async def test_summary_failure_sends_nothing(
    notification_service: NotificationService,
    mailer: AsyncMock,
) -> None:
    respx.post(GENERATE_URL).mock(return_value=httpx.Response(503))

    with pytest.raises(UpstreamError):
        await notification_service.send_update("p", ["a@x.com"], "Alice: change", None)

    mailer.send_project_update.assert_not_awaited()
