"""Use case for creating a notification and pushing it to its owner."""

from __future__ import annotations

from sqlalchemy.orm import Session

from secult_notify.domain.entities import Notification
from secult_notify.infrastructure.notifications import dispatch_notification
from secult_notify.infrastructure.repositories import NotificationRepository
from secult_notify.utils import now_in_app_timezone


def create_notification(
    session: Session,
    *,
    user_id: str,
    kind: str,
    message: str,
) -> Notification:
    """Persist a new unread notification and dispatch it over websockets."""

    if not message.strip():
        raise ValueError("Notification message cannot be empty")

    notification = Notification(
        id=None,
        owner_id=user_id,
        kind=kind,
        message=message,
        is_read=False,
        created_at=now_in_app_timezone(),
    )
    saved = NotificationRepository(session).create(notification)
    dispatch_notification(saved)
    return saved
