"""Conversion of wire payloads into :class:`Notification` entities."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from secult_notify.domain.entities import Notification
from secult_notify.interfaces.api.schemas import NotificationRead

from .errors import MalformedPayloadError


def parse_notification(data: Any, *, default_owner_id: str | None = None) -> Notification:
    """Validate ``data`` and return the matching entity.

    ``default_owner_id`` applies to snapshot entries, which the listing
    endpoint may return without ``user_id``.
    """

    if not isinstance(data, dict):
        raise MalformedPayloadError(f"Expected an object, got {type(data).__name__}")
    try:
        payload = NotificationRead.model_validate(data)
        return payload.to_entity(default_owner_id=default_owner_id)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        raise MalformedPayloadError(f"Invalid notification payload ({fields})") from exc
    except ValueError as exc:
        raise MalformedPayloadError(str(exc)) from exc


__all__ = ["parse_notification"]
