"""Test doubles and builders for the push client tests."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from secult_notify.client.errors import FetchFailedError, TransportError
from secult_notify.domain.entities import Notification

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Return a timestamp ``minutes`` after the shared base time."""

    return BASE_TIME + timedelta(minutes=minutes)


def make_notification(
    notification_id: str,
    *,
    owner_id: str = "user-a",
    minutes: int = 0,
    is_read: bool = False,
) -> Notification:
    return Notification(
        id=notification_id,
        owner_id=owner_id,
        kind="alert",
        message=f"Notification {notification_id}",
        is_read=is_read,
        created_at=at(minutes),
    )


def notification_payload(
    notification_id: str,
    *,
    user_id: str | None = "user-a",
    minutes: int = 0,
    is_read: bool = False,
    kind: str = "alert",
    message: str | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": notification_id,
        "type": kind,
        "message": message or f"Notification {notification_id}",
        "is_read": is_read,
        "created_at": at(minutes).isoformat(),
    }
    if user_id is not None:
        payload["user_id"] = user_id
    return payload


class FakeTransport:
    """In-memory stand-in for a websocket connection."""

    def __init__(self, server: "FakePushServer") -> None:
        self._server = server
        self._frames: asyncio.Queue[Any] = asyncio.Queue()
        self.credential: str | None = None
        self.closed = False

    async def connect(self, credential: str) -> None:
        self.credential = credential
        self._server.connect_attempts.append(credential)
        if self._server.refuse_connections > 0:
            self._server.refuse_connections -= 1
            raise TransportError("connection refused")
        self._server.active.append(self)

    async def receive(self) -> dict[str, Any]:
        frame = await self._frames.get()
        if isinstance(frame, Exception):
            raise frame
        return frame

    async def close(self) -> None:
        self.closed = True
        if self in self._server.active:
            self._server.active.remove(self)
        for hook in self._server.on_close:
            hook(self)


class FakePushServer:
    """Hands out :class:`FakeTransport` instances and feeds them frames."""

    def __init__(self) -> None:
        self.refuse_connections = 0
        self.connect_attempts: list[str] = []
        self.active: list[FakeTransport] = []
        self.transports: list[FakeTransport] = []
        self.on_close: list[Callable[[FakeTransport], None]] = []

    def factory(self) -> FakeTransport:
        transport = FakeTransport(self)
        self.transports.append(transport)
        return transport

    def send(self, frame: Any) -> None:
        for transport in self.active:
            transport._frames.put_nowait(frame)

    def push(self, notification_id: str, **fields: Any) -> None:
        self.send(
            {"type": "new_notification", "data": notification_payload(notification_id, **fields)}
        )

    def drop(self) -> None:
        for transport in list(self.active):
            transport._frames.put_nowait(TransportError("connection lost"))


class FakeSnapshotFetcher:
    """Snapshot source whose answer can be held back until ``release()``."""

    def __init__(self, notifications: list[Notification] | None = None) -> None:
        self.notifications = notifications or []
        self.error: FetchFailedError | None = None
        self.calls: list[str] = []
        self.started = asyncio.Event()
        self._released = asyncio.Event()
        self._released.set()

    def hold(self) -> None:
        self._released.clear()

    def release(self) -> None:
        self._released.set()

    async def fetch(self, credential, *, unread_only: bool = False) -> list[Notification]:
        self.calls.append(credential.identity.user_id)
        self.started.set()
        await self._released.wait()
        if self.error is not None:
            raise self.error
        return [
            notification
            for notification in self.notifications
            if notification.owner_id == credential.identity.user_id
        ]


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate()`` holds."""

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)
