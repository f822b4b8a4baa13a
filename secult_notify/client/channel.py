"""Authenticated, auto-reconnecting push channel for new notifications."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable

from secult_notify.domain.entities import NEW_NOTIFICATION_EVENT, Notification

from .errors import MalformedPayloadError, TransportError
from .listeners import ListenerRegistry, Subscription
from .payloads import parse_notification
from .transport import PushTransport

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = 1.0

TransportFactory = Callable[[], PushTransport]


class ChannelState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"


class PushChannel:
    """Keep one live transport open and fan incoming notifications out.

    Every ``open()`` starts a new cycle identified by a generation number.
    Work belonging to an older generation (a retry sleeping on its timer, a
    frame read just before ``close()``) checks the generation and stops
    without touching listeners.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts cannot be negative")
        self._transport_factory = transport_factory
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._state = ChannelState.IDLE
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._notifications: ListenerRegistry[Notification] = ListenerRegistry(
            NEW_NOTIFICATION_EVENT
        )
        self._connection_errors: ListenerRegistry[str] = ListenerRegistry("connection_error")
        self._state_changes: ListenerRegistry[ChannelState] = ListenerRegistry("state")

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: Callable[[Notification], None]) -> Subscription:
        """Receive every new notification delivered by the server."""

        return self._notifications.add(listener)

    def on_connection_error(self, listener: Callable[[str], None]) -> Subscription:
        """Receive a diagnostic message whenever a connection attempt fails or drops."""

        return self._connection_errors.add(listener)

    def on_state_change(self, listener: Callable[[ChannelState], None]) -> Subscription:
        return self._state_changes.add(listener)

    async def open(self, credential: str) -> None:
        """Start connecting with ``credential``; failures never raise here.

        Reopening an active channel ends the previous cycle first but keeps
        the registered listeners.
        """

        await self._stop_cycle()
        generation = self._generation
        self._set_state(ChannelState.CONNECTING)
        self._task = asyncio.get_running_loop().create_task(
            self._run(generation, credential), name=f"push-channel-{generation}"
        )

    def detach(self) -> None:
        """Drop every listener and retire the current cycle without awaiting it.

        Nothing reaches a listener after this returns. The transport of the
        retired cycle is released by the next ``close()`` or ``open()``.
        """

        self._notifications.clear()
        self._connection_errors.clear()
        self._state_changes.clear()
        self._generation += 1
        self._state = ChannelState.IDLE

    async def close(self) -> None:
        """Detach every listener, then tear the transport down."""

        self.detach()
        await self._stop_cycle()
        self._state = ChannelState.IDLE

    async def _stop_cycle(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Push channel task ended with an error")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _set_state(self, state: ChannelState) -> None:
        if state is self._state:
            return
        logger.debug("Push channel %s -> %s", self._state.value, state.value)
        self._state = state
        self._state_changes.emit(state)

    async def _run(self, generation: int, credential: str) -> None:
        failures = 0
        while self._is_current(generation):
            transport = self._transport_factory()
            try:
                await transport.connect(credential)
                if not self._is_current(generation):
                    return
                failures = 0
                self._set_state(ChannelState.CONNECTED)
                logger.info("Push channel connected")
                while True:
                    frame = await transport.receive()
                    if not self._is_current(generation):
                        return
                    self._handle_frame(frame)
            except TransportError as exc:
                reason = str(exc) or exc.__class__.__name__
            except Exception as exc:
                logger.exception("Unexpected push transport failure")
                reason = f"{exc.__class__.__name__}: {exc}"
            finally:
                await self._close_transport(transport)

            if not self._is_current(generation):
                return
            logger.warning("Push channel connection error: %s", reason)
            self._connection_errors.emit(reason)
            if failures >= self._max_attempts:
                logger.warning(
                    "Push channel giving up after %s reconnection attempts", failures
                )
                self._set_state(ChannelState.DISCONNECTED)
                return
            failures += 1
            self._set_state(ChannelState.RECONNECTING)
            await asyncio.sleep(self._retry_delay)

    def _handle_frame(self, frame: dict[str, Any]) -> None:
        if frame.get("type") != NEW_NOTIFICATION_EVENT:
            logger.debug("Ignoring push frame of type %r", frame.get("type"))
            return
        try:
            notification = parse_notification(frame.get("data"))
        except MalformedPayloadError as exc:
            logger.warning("Discarding malformed push payload: %s", exc)
            return
        self._notifications.emit(notification)

    @staticmethod
    async def _close_transport(transport: PushTransport) -> None:
        try:
            await transport.close()
        except Exception as exc:  # noqa: BLE001 - the transport is discarded either way
            logger.debug("Ignoring error while closing push transport: %s", exc)


__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_RETRY_DELAY",
    "ChannelState",
    "PushChannel",
    "TransportFactory",
]
