"""Turn stored notifications into push frames and hand them to live sockets."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from secult_notify.domain.entities import NEW_NOTIFICATION_EVENT, Notification

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)


def build_push_frame(notification: Notification) -> dict[str, Any]:
    """Return the ``new_notification`` frame sent to the owner's sockets."""

    created_at = notification.created_at
    return {
        "type": NEW_NOTIFICATION_EVENT,
        "data": {
            "id": notification.id,
            "user_id": notification.owner_id,
            "type": notification.kind,
            "message": notification.message,
            "is_read": notification.is_read,
            "created_at": created_at.isoformat() if created_at else None,
        },
    }


class NotificationPublisher:
    """Deliver freshly created notifications from sync or async call sites."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[None]] = set()

    def dispatch(self, notification: Notification) -> None:
        frame = build_push_frame(notification)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._deliver(notification.owner_id, frame))
            self._pending.add(task)
            task.add_done_callback(self._delivery_finished)
            return

        # Sync routes run in anyio's worker threads.
        try:
            from_thread.run(self._deliver, notification.owner_id, frame)
        except RuntimeError:
            logger.warning(
                "No event loop available, notification %s stored without live delivery",
                notification.id,
            )

    async def _deliver(self, user_id: str, frame: dict[str, Any]) -> None:
        delivered = await self._manager.send_to_user(user_id, frame)
        logger.debug("Pushed notification %s to %s socket(s)", frame["data"]["id"], delivered)

    def _delivery_finished(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Push delivery failed", exc_info=exc)

    @property
    def pending_deliveries(self) -> int:
        return len(self._pending)


notification_publisher = NotificationPublisher(notification_manager)


def dispatch_notification(notification: Notification) -> None:
    notification_publisher.dispatch(notification)


__all__ = [
    "NotificationPublisher",
    "build_push_frame",
    "dispatch_notification",
    "notification_publisher",
]
