"""Domain entities exposed by the application."""

from .identity import ADMIN_ROLE, Identity
from .notification import NEW_NOTIFICATION_EVENT, Notification

__all__ = [
    "ADMIN_ROLE",
    "Identity",
    "NEW_NOTIFICATION_EVENT",
    "Notification",
]
