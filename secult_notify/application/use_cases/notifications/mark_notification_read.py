"""Use case for acknowledging a notification."""

from sqlalchemy.orm import Session

from secult_notify.infrastructure.repositories import NotificationRepository


class NotificationNotFoundError(ValueError):
    """Raised when the notification does not exist or belongs to someone else."""


def mark_notification_read(session: Session, notification_id: str, *, user_id: str) -> None:
    """Mark the notification as read.

    Calling it again for an already read notification succeeds silently.
    """

    if not NotificationRepository(session).mark_as_read(notification_id, user_id=user_id):
        raise NotificationNotFoundError("Notification not found")
