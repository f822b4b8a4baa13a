"""Registry of live notification sockets, keyed by the owning user id."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track the open sockets of every user so pushes reach all of their tabs."""

    def __init__(self) -> None:
        self._sockets: dict[str, list[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets.setdefault(user_id, []).append(websocket)
        logger.info(
            "Push socket opened for user %s (%s open)", user_id, self.connection_count(user_id)
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id)
        if not sockets or websocket not in sockets:
            return
        sockets.remove(websocket)
        if not sockets:
            del self._sockets[user_id]
        logger.info("Push socket closed for user %s", user_id)

    def connection_count(self, user_id: str) -> int:
        return len(self._sockets.get(user_id, ()))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        """Deliver ``message`` to each socket of ``user_id``.

        Returns how many sockets accepted the frame. Sockets that fail to send
        are unregistered.
        """

        delivered = 0
        for websocket in list(self._sockets.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except Exception:  # noqa: BLE001 - any send failure means the socket is gone
                logger.warning("Dropping broken push socket for user %s", user_id, exc_info=True)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
