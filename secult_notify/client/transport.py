"""Transports carrying push frames from the notification server."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .errors import TransportError

logger = logging.getLogger(__name__)


class PushTransport(Protocol):
    """One connection attempt's worth of bidirectional link.

    Implementations raise :class:`TransportError` when the handshake fails
    or the link drops; a transport is never reused after ``close()``.
    """

    async def connect(self, credential: str) -> None:
        ...

    async def receive(self) -> dict[str, Any]:
        ...

    async def close(self) -> None:
        ...


def with_token(url: str, token: str) -> str:
    """Return ``url`` with ``token`` added to its query string."""

    parts = urlsplit(url)
    query = [(key, value) for key, value in parse_qsl(parts.query) if key != "token"]
    query.append(("token", token))
    return urlunsplit(parts._replace(query=urlencode(query)))


class WebSocketTransport:
    """JSON frames over a websocket authenticated with a ``token`` query param."""

    def __init__(self, url: str, *, open_timeout: float = 10.0) -> None:
        self._url = url
        self._open_timeout = open_timeout
        self._connection: Any = None

    async def connect(self, credential: str) -> None:
        try:
            self._connection = await websockets.connect(
                with_token(self._url, credential),
                open_timeout=self._open_timeout,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise TransportError(f"Could not connect to {self._url}: {exc}") from exc

    async def receive(self) -> dict[str, Any]:
        if self._connection is None:
            raise TransportError("Transport is not connected")
        while True:
            try:
                raw = await self._connection.recv()
            except ConnectionClosed as exc:
                raise TransportError(f"Connection closed: {exc}") from exc
            except (OSError, WebSocketException) as exc:
                raise TransportError(str(exc)) from exc
            try:
                frame = json.loads(raw)
            except (ValueError, RecursionError):
                logger.warning("Ignoring non JSON frame from %s", self._url)
                continue
            if isinstance(frame, dict):
                return frame
            logger.warning("Ignoring non object frame from %s", self._url)

    async def close(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()


__all__ = ["PushTransport", "WebSocketTransport", "with_token"]
