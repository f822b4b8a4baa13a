"""Live delivery of notifications over websockets."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    NotificationPublisher,
    build_push_frame,
    dispatch_notification,
    notification_publisher,
)

__all__ = [
    "NotificationConnectionManager",
    "NotificationPublisher",
    "build_push_frame",
    "dispatch_notification",
    "notification_manager",
    "notification_publisher",
]
