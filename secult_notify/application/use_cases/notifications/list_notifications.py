"""Use case for listing a user's notifications."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from secult_notify.domain.entities import Notification
from secult_notify.infrastructure.repositories import NotificationRepository


def list_notifications(
    session: Session, user_id: str, *, unread_only: bool = False
) -> Sequence[Notification]:
    """Return ``user_id``'s notifications, newest first."""

    return NotificationRepository(session).list_for_user(user_id, unread_only=unread_only)
