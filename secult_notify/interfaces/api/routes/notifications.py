"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from secult_notify.application.use_cases.notifications import (
    NotificationNotFoundError,
    create_notification as create_notification_uc,
    list_notifications as list_notifications_uc,
    mark_notification_read as mark_notification_read_uc,
)
from secult_notify.domain.entities import Identity
from secult_notify.infrastructure.database import get_db
from secult_notify.infrastructure.notifications import notification_manager
from secult_notify.interfaces.api.dependencies import (
    get_current_user_identity,
    is_valid_uuid,
    require_admin,
    resolve_identity,
)
from secult_notify.interfaces.api.schemas import (
    NotificationActionResponse,
    NotificationCreate,
    NotificationRead,
)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user_identity),
) -> list[NotificationRead]:
    """Return the authenticated user's notifications, newest first."""

    notifications = list_notifications_uc(db, identity.user_id, unread_only=unread_only)
    return [NotificationRead.from_entity(notification) for notification in notifications]


@router.patch("/{notification_id}/read", response_model=NotificationActionResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user_identity),
) -> NotificationActionResponse:
    """Mark one of the authenticated user's notifications as read."""

    if not is_valid_uuid(notification_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid notification id: {notification_id}",
        )
    try:
        mark_notification_read_uc(db, notification_id, user_id=identity.user_id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotificationActionResponse(message="Notification marked as read")


@router.post("", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
) -> NotificationRead:
    """Create a notification for ``payload.user_id`` and push it live."""

    if not is_valid_uuid(payload.user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid user id: {payload.user_id}",
        )
    try:
        notification = create_notification_uc(
            db, user_id=payload.user_id, kind=payload.type, message=payload.message
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return NotificationRead.from_entity(notification)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams new notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        logger.info("Rejecting websocket without token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        identity = resolve_identity(token)
    except HTTPException:
        logger.info("Rejecting websocket with invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await notification_manager.connect(identity.user_id, websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        notification_manager.disconnect(identity.user_id, websocket)
