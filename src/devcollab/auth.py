"""Identity verification for DevCollab.

Sign-in happens in the browser against Firebase Authentication; the API
receives the resulting Firebase ID token as a bearer token and verifies it
with firebase-admin. The verified claims become an Identity.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from devcollab.config import FirebaseConfig
from devcollab.errors import AuthenticationError
from devcollab.logging import get_logger

logger = get_logger(__name__)

_APP_NAME = "devcollab"


@dataclass(frozen=True)
class Identity:
    """Verified identity of the caller.

    Attributes:
        uid: Identity provider user id
        email: Email claim
        display_name: Name claim, if the provider supplied one
        photo_url: Picture claim, if the provider supplied one
    """

    uid: str
    email: str
    display_name: str | None = None
    photo_url: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Identity:
        """Build from decoded Firebase ID token claims.

        Raises:
            AuthenticationError: If the token carries no email claim.
        """
        email = claims.get("email")
        if not email:
            raise AuthenticationError("Identity token has no email claim")
        return cls(
            uid=claims["uid"],
            email=email,
            display_name=claims.get("name") or None,
            photo_url=claims.get("picture") or None,
        )


class FirebaseIdentityVerifier:
    """Verifies Firebase ID tokens with firebase-admin.

    The firebase-admin app is initialized on first use so that processes
    which never authenticate a request (CLI, tests) need no credentials.
    """

    def __init__(self, config: FirebaseConfig) -> None:
        self.config = config
        self._app: firebase_admin.App | None = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is None:
            try:
                self._app = firebase_admin.get_app(_APP_NAME)
            except ValueError:
                cred = (
                    credentials.Certificate(str(self.config.credentials_file))
                    if self.config.credentials_file is not None
                    else credentials.ApplicationDefault()
                )
                options = {"projectId": self.config.project_id} if self.config.project_id else None
                self._app = firebase_admin.initialize_app(cred, options, name=_APP_NAME)
                logger.info("firebase_app_initialized", project_id=self.config.project_id)
        return self._app

    async def verify(self, token: str) -> Identity:
        """Verify an ID token and return the caller's identity.

        Raises:
            AuthenticationError: If the token is invalid, expired or revoked.
        """
        app = self._get_app()
        try:
            # verify_id_token may fetch Google's public keys over the network
            claims = await asyncio.to_thread(firebase_auth.verify_id_token, token, app)
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.CertificateFetchError) as e:
            logger.warning("identity_token_rejected", error=str(e))
            raise AuthenticationError(f"Invalid token: {e}") from e

        return Identity.from_claims(claims)
