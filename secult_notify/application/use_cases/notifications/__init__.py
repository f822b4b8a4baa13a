"""Use cases for user notifications."""

from .create_notification import create_notification
from .list_notifications import list_notifications
from .mark_notification_read import NotificationNotFoundError, mark_notification_read

__all__ = [
    "NotificationNotFoundError",
    "create_notification",
    "list_notifications",
    "mark_notification_read",
]
