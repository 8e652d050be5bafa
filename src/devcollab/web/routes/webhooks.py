"""Inbound GitHub webhook endpoint.

GitHub posts push events here for repositories created through DevCollab.
The endpoint is not authenticated with a user token. When a webhook secret
is configured the X-Hub-Signature-256 header must carry the HMAC-SHA256 of
the raw body.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any

from fastapi import APIRouter, Depends, Request

from devcollab.config import DevCollabConfig
from devcollab.errors import AuthenticationError, DevCollabError
from devcollab.logging import get_logger
from devcollab.services.relay import PushEventRelay
from devcollab.web.dependencies import get_config, get_push_relay

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"


def sign_payload(body: bytes, secret: str) -> str:
    """Compute the X-Hub-Signature-256 value for a body."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(body: bytes, secret: str, signature: str | None) -> bool:
    """Constant-time check of a GitHub webhook signature."""
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(body, secret), signature)


def create_webhooks_router() -> APIRouter:
    """Create the GitHub webhook router.

    Routes:
        POST /api/webhooks/github - Relay push events to collaborators
    """
    router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

    @router.post("/github")
    async def github_webhook(
        request: Request,
        config: DevCollabConfig = Depends(get_config),  # noqa: B008
        relay: PushEventRelay = Depends(get_push_relay),  # noqa: B008
    ) -> dict[str, Any]:
        """Relay a push event.

        Returns:
            ``{"message": ...}`` when the event is discarded, or
            ``{"success": true}`` once collaborators were notified.
        """
        body = await request.body()

        secret = config.github.webhook_secret
        if secret and not verify_signature(body, secret, request.headers.get(SIGNATURE_HEADER)):
            logger.warning("webhook_signature_invalid")
            raise AuthenticationError("Invalid webhook signature")

        event = request.headers.get(EVENT_HEADER)
        if event is not None and event != "push":
            logger.info("webhook_event_ignored", github_event=event)
            return {"message": "Ignored event"}

        try:
            payload = json.loads(body)
            outcome = await relay.handle_push(payload)
        except Exception as e:
            logger.error("webhook_processing_failed", error=str(e), exc_info=True)
            raise DevCollabError("Webhook processing failed") from e

        if not outcome.notified:
            return {"message": outcome.message}
        return {"success": True}

    return router
