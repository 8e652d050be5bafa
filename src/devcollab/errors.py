"""Error taxonomy for DevCollab.

Every failure a caller can act on is raised as a subclass of
DevCollabError. The web layer maps each class to an HTTP status code;
the CLI prints the message.
"""

from __future__ import annotations

from enum import Enum


class DevCollabError(Exception):
    """Base exception for DevCollab domain errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(DevCollabError):
    """A required field is missing or malformed."""

    status_code = 400


class AuthenticationError(DevCollabError):
    """The caller did not present a valid identity token."""

    status_code = 401


class ForbiddenError(DevCollabError):
    """The caller does not own the resource it tries to change."""

    status_code = 403


class NotFoundError(DevCollabError):
    """A referenced profile or project does not exist."""

    status_code = 404


class ConflictError(DevCollabError):
    """The change collides with existing state (duplicate collaborator, linked repo)."""

    status_code = 409


class UpstreamErrorKind(str, Enum):
    """Why an adapter call failed.

    Attributes:
        CONFIGURATION: A credential or setting for the service is missing.
        UPSTREAM: The external service rejected the call or was unreachable.
    """

    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"


class UpstreamError(DevCollabError):
    """An external service call (GitHub, Gemini, SMTP) failed.

    Attributes:
        service: Name of the external service
        kind: Configuration problem or upstream failure
        upstream_status: HTTP status returned by the service, if any
    """

    def __init__(
        self,
        message: str,
        *,
        service: str,
        kind: UpstreamErrorKind = UpstreamErrorKind.UPSTREAM,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.kind = kind
        self.upstream_status = upstream_status

    @classmethod
    def missing_credential(cls, service: str, setting: str) -> UpstreamError:
        """Build the error raised when a service credential is not configured."""
        return cls(
            f"{service} is not configured: set {setting}",
            service=service,
            kind=UpstreamErrorKind.CONFIGURATION,
        )

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if self.kind is UpstreamErrorKind.CONFIGURATION:
            return 500
        if self.upstream_status is not None and self.upstream_status >= 400:
            return self.upstream_status
        return 502
