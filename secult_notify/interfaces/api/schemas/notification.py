"""Pydantic models describing notification payloads.

``NotificationRead`` is the wire shape shared by the REST listing, the
websocket frames and the push client.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from secult_notify.domain.entities import Notification


class NotificationCreate(BaseModel):
    """Payload used by administrators to notify a user."""

    user_id: str = Field(..., min_length=1, description="Recipient identifier")
    type: str = Field(default="alert", min_length=1, max_length=50)
    message: str = Field(..., min_length=1)


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str = Field(..., min_length=1)
    user_id: str | None = None
    type: str
    message: str
    is_read: bool = False
    created_at: datetime

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationRead":
        return cls(
            id=notification.id or "",
            user_id=notification.owner_id,
            type=notification.kind,
            message=notification.message,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )

    def to_entity(self, *, default_owner_id: str | None = None) -> Notification:
        """Return the domain entity, falling back to ``default_owner_id``.

        Raises ``ValueError`` when no owner can be determined.
        """

        owner_id = self.user_id or default_owner_id
        if not owner_id:
            raise ValueError("Notification payload does not identify its owner")
        return Notification(
            id=self.id,
            owner_id=owner_id,
            kind=self.type,
            message=self.message,
            is_read=self.is_read,
            created_at=self.created_at,
        )


class NotificationActionResponse(BaseModel):
    message: str


__all__ = ["NotificationActionResponse", "NotificationCreate", "NotificationRead"]
