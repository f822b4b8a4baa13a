"""Listener registries with explicit, cancel-once subscription handles."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by :meth:`ListenerRegistry.add`.

    ``cancel()`` detaches the listener the first time it is called and does
    nothing afterwards.
    """

    def __init__(self, on_cancel: Callable[["Subscription"], None]) -> None:
        self._on_cancel: Callable[["Subscription"], None] | None = on_cancel

    @property
    def active(self) -> bool:
        return self._on_cancel is not None

    def cancel(self) -> None:
        on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel(self)


class ListenerRegistry(Generic[T]):
    """Ordered set of callbacks receiving values of type ``T``."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: dict[Subscription, Callable[[T], None]] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: Callable[[T], None]) -> Subscription:
        subscription = Subscription(self._remove)
        self._listeners[subscription] = listener
        return subscription

    def emit(self, value: T) -> None:
        """Call every listener with ``value``; a failing listener is logged."""

        for listener in list(self._listeners.values()):
            try:
                listener(value)
            except Exception:
                logger.exception("Listener for %s failed", self._name)

    def clear(self) -> None:
        """Cancel every outstanding subscription."""

        for subscription in list(self._listeners):
            subscription.cancel()

    def _remove(self, subscription: Subscription) -> None:
        self._listeners.pop(subscription, None)


__all__ = ["ListenerRegistry", "Subscription"]
