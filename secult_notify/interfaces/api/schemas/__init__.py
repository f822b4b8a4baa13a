from .notification import NotificationActionResponse, NotificationCreate, NotificationRead

__all__ = [
    "NotificationActionResponse",
    "NotificationCreate",
    "NotificationRead",
]
