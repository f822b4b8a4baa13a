"""In-memory reconciliation of snapshot and pushed notifications."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable

from secult_notify.domain.entities import Notification

from .listeners import ListenerRegistry, Subscription

logger = logging.getLogger(__name__)


class ReconciliationStore:
    """Ordered, duplicate-free notification list for a single owner.

    Entries are kept newest first by ``created_at``; among equal timestamps
    the entry that arrived last comes first. ``unread_count`` is adjusted in
    the same step as every mutation of the list.

    The store is not thread-safe; all calls are expected from the event loop
    that drives the push channel.
    """

    def __init__(self, owner_id: str) -> None:
        self._owner_id = owner_id
        self._items: list[Notification] = []
        self._by_id: dict[str, Notification] = {}
        self._unread_count = 0
        self._changes: ListenerRegistry[ReconciliationStore] = ListenerRegistry("store")

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return tuple(replace(entry) for entry in self._items)

    @property
    def unread_count(self) -> int:
        return self._unread_count

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self._by_id

    def get(self, notification_id: str) -> Notification | None:
        entry = self._by_id.get(notification_id)
        return replace(entry) if entry is not None else None

    def subscribe(self, listener: Callable[["ReconciliationStore"], None]) -> Subscription:
        """Call ``listener`` with the store after every effective change."""

        return self._changes.add(listener)

    def load_snapshot(self, notifications: Iterable[Notification]) -> None:
        """Replace the whole content with ``notifications``.

        Foreign entries and repeated ids are dropped. The order of the input is
        kept among entries sharing a timestamp.
        """

        items: list[Notification] = []
        by_id: dict[str, Notification] = {}
        for notification in notifications:
            if not self._accepts(notification) or notification.id in by_id:
                continue
            entry = replace(notification)
            items.append(entry)
            by_id[entry.id] = entry
        items.sort(key=lambda entry: entry.created_at, reverse=True)

        self._items = items
        self._by_id = by_id
        self._unread_count = sum(1 for entry in items if entry.is_unread())
        logger.debug(
            "Loaded snapshot with %s notifications (%s unread) for %s",
            len(items),
            self._unread_count,
            self._owner_id,
        )
        self._changes.emit(self)

    def apply_push(self, notification: Notification) -> bool:
        """Insert a pushed notification; return ``False`` when it was discarded."""

        if not self._accepts(notification):
            return False
        if notification.id in self._by_id:
            logger.debug("Ignoring duplicate notification %s", notification.id)
            return False

        entry = replace(notification)
        index = 0
        # Pushed entries are normally the newest, so this stops at the head.
        while index < len(self._items) and self._items[index].created_at > entry.created_at:
            index += 1
        self._items.insert(index, entry)
        self._by_id[entry.id] = entry
        if entry.is_unread():
            self._unread_count += 1
        self._changes.emit(self)
        return True

    def mark_read(self, notification_id: str) -> bool:
        """Flag ``notification_id`` as read; return ``False`` if nothing changed."""

        entry = self._by_id.get(notification_id)
        if entry is None or entry.is_read:
            return False
        entry.is_read = True
        self._unread_count -= 1
        self._changes.emit(self)
        return True

    def clear(self) -> None:
        """Forget every entry; used when the owning session ends."""

        had_items = bool(self._items)
        self._items = []
        self._by_id = {}
        self._unread_count = 0
        if had_items:
            self._changes.emit(self)
        self._changes.clear()

    def _accepts(self, notification: Notification) -> bool:
        if notification.owner_id != self._owner_id:
            logger.warning(
                "Rejecting notification %s addressed to %s (session owner %s)",
                notification.id,
                notification.owner_id,
                self._owner_id,
            )
            return False
        if notification.id is None or notification.created_at is None:
            logger.warning("Rejecting notification without id or created_at: %r", notification)
            return False
        return True


__all__ = ["ReconciliationStore"]
