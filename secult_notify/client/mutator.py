"""Mark-as-read bridge between the user, the backend and the local store."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from .credentials import CredentialSource
from .errors import AuthRequiredError
from .rest import NOTIFICATIONS_PATH, error_from_exception, error_from_response
from .store import ReconciliationStore

logger = logging.getLogger(__name__)


class ReadStateMutator:
    """Persist a read acknowledgement, then reflect it locally.

    The local entry only changes once the server accepted the request; a
    failure leaves the store untouched and is raised to the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        credentials: CredentialSource,
        store: ReconciliationStore,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._store = store

    async def mark_as_read(self, notification_id: str) -> None:
        credential = self._credentials.current()
        if credential is None or credential.identity.user_id != self._store.owner_id:
            # The token must belong to the store's owner.
            raise AuthRequiredError()

        path = f"{NOTIFICATIONS_PATH}/{quote(notification_id, safe='')}/read"
        try:
            response = await self._client.patch(path, headers=credential.authorization_header())
        except httpx.HTTPError as exc:
            raise error_from_exception(exc, "Could not mark notification as read") from exc

        if not response.is_success:
            error = error_from_response(response, "Could not mark notification as read")
            logger.warning("Mark as read for %s rejected: %s", notification_id, error)
            raise error

        self._store.mark_read(notification_id)


__all__ = ["ReadStateMutator"]
