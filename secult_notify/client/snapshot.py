"""One-shot retrieval of the authenticated user's notification list."""

from __future__ import annotations

import logging

import httpx

from secult_notify.domain.entities import Notification

from .credentials import Credential
from .errors import FetchFailedError, MalformedPayloadError
from .rest import NOTIFICATIONS_PATH, error_from_exception, error_from_response
from .payloads import parse_notification

logger = logging.getLogger(__name__)


class SnapshotFetcher:
    """Fetch ``GET /api/notifications`` for the credential's identity."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, credential: Credential, *, unread_only: bool = False) -> list[Notification]:
        """Return every notification of ``credential``'s owner.

        Raises :class:`FetchFailedError` on network errors and non-2xx
        answers. Individual malformed entries are skipped.
        """

        params = {"unreadOnly": "true"} if unread_only else None
        try:
            response = await self._client.get(
                NOTIFICATIONS_PATH,
                params=params,
                headers=credential.authorization_header(),
            )
        except httpx.HTTPError as exc:
            raise error_from_exception(exc, "Could not load notifications") from exc

        if not response.is_success:
            raise error_from_response(response, "Could not load notifications")

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, list):
            raise FetchFailedError(
                "Could not load notifications: expected a JSON array",
                status_code=response.status_code,
            )

        owner_id = credential.identity.user_id
        notifications: list[Notification] = []
        for entry in body:
            try:
                notifications.append(parse_notification(entry, default_owner_id=owner_id))
            except MalformedPayloadError as exc:
                logger.warning("Skipping malformed snapshot entry: %s", exc)
        return notifications


__all__ = ["SnapshotFetcher"]
