"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

NEW_NOTIFICATION_EVENT = "new_notification"


@dataclass
class Notification:
    """Information message delivered to a specific user.

    Everything except ``is_read`` is fixed once the server creates the
    notification; ``is_read`` only ever moves from ``False`` to ``True``.
    """

    id: str | None
    owner_id: str
    kind: str
    message: str
    is_read: bool = False
    created_at: datetime | None = None

    def is_unread(self) -> bool:
        return not self.is_read


__all__ = ["NEW_NOTIFICATION_EVENT", "Notification"]
