"""Errors raised by the notification push client."""

from __future__ import annotations

AUTH_REQUIRED = "auth_required"
CONNECTION_ERROR = "connection_error"
FETCH_FAILED = "fetch_failed"
MALFORMED_PAYLOAD = "malformed_payload"


class NotificationClientError(RuntimeError):
    """Base class for client failures; ``kind`` tags the failure category."""

    kind: str = "notification_client_error"


class AuthRequiredError(NotificationClientError):
    """No usable credential was available for an authenticated operation."""

    kind = AUTH_REQUIRED

    def __init__(self, message: str = "Authentication required, please log in again") -> None:
        super().__init__(message)


class ConnectionFailedError(NotificationClientError):
    """The push transport could not be established or was dropped."""

    kind = CONNECTION_ERROR


class FetchFailedError(NotificationClientError):
    """A snapshot or mark-read request failed."""

    kind = FETCH_FAILED

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedPayloadError(NotificationClientError):
    """A notification payload is missing required fields."""

    kind = MALFORMED_PAYLOAD


class TransportError(ConnectionFailedError):
    """Raised by push transports when the handshake fails or the link drops."""


__all__ = [
    "AUTH_REQUIRED",
    "CONNECTION_ERROR",
    "FETCH_FAILED",
    "MALFORMED_PAYLOAD",
    "AuthRequiredError",
    "ConnectionFailedError",
    "FetchFailedError",
    "MalformedPayloadError",
    "NotificationClientError",
    "TransportError",
]
