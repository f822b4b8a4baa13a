"""Tests for scheduling live notification delivery."""

from __future__ import annotations

import logging

import pytest

from secult_notify.infrastructure.notifications import NotificationPublisher, build_push_frame

from tests.helpers import at, make_notification, wait_until

pytestmark = pytest.mark.anyio


class RecordingManager:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[tuple[str, dict]] = []
        self.error = error

    async def send_to_user(self, user_id: str, message: dict) -> int:
        if self.error is not None:
            raise self.error
        self.sent.append((user_id, message))
        return 1


async def test_dispatch_on_the_running_loop_keeps_the_delivery_until_done():
    manager = RecordingManager()
    publisher = NotificationPublisher(manager)
    notification = make_notification("n1", owner_id="user-a", minutes=1)

    publisher.dispatch(notification)

    assert publisher.pending_deliveries == 1
    await wait_until(lambda: publisher.pending_deliveries == 0)
    assert manager.sent == [
        (
            "user-a",
            {
                "type": "new_notification",
                "data": {
                    "id": "n1",
                    "user_id": "user-a",
                    "type": "alert",
                    "message": "Notification n1",
                    "is_read": False,
                    "created_at": at(1).isoformat(),
                },
            },
        )
    ]
    assert build_push_frame(notification) == manager.sent[0][1]


async def test_failed_delivery_is_logged(caplog):
    publisher = NotificationPublisher(RecordingManager(error=RuntimeError("socket gone")))

    with caplog.at_level(logging.ERROR):
        publisher.dispatch(make_notification("n1"))
        await wait_until(lambda: publisher.pending_deliveries == 0)

    assert "Push delivery failed" in caplog.text
