"""Real-time notification client.

Typical use::

    credentials = TokenCredentialSource()
    credentials.login(token)
    async with connect_notifications(credentials) as gate:
        session = gate.session
        print(session.store.unread_count)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from secult_notify.config import ClientSettings, get_client_settings

from .channel import ChannelState, PushChannel
from .credentials import Credential, CredentialSource, TokenCredentialSource
from .errors import (
    AuthRequiredError,
    ConnectionFailedError,
    FetchFailedError,
    MalformedPayloadError,
    NotificationClientError,
    TransportError,
)
from .listeners import Subscription
from .mutator import ReadStateMutator
from .session import ChannelLifecycleGate, NotificationSession
from .snapshot import SnapshotFetcher
from .store import ReconciliationStore
from .transport import PushTransport, WebSocketTransport


def build_gate(
    settings: ClientSettings,
    credentials: CredentialSource,
    http_client: httpx.AsyncClient,
) -> ChannelLifecycleGate:
    """Wire a gate whose sessions talk to the configured server."""

    fetcher = SnapshotFetcher(http_client)

    def make_mutator(store: ReconciliationStore) -> ReadStateMutator:
        return ReadStateMutator(http_client, credentials, store)

    def make_session(credential: Credential) -> NotificationSession:
        channel = PushChannel(
            lambda: WebSocketTransport(
                settings.push_url, open_timeout=settings.request_timeout_seconds
            ),
            max_attempts=settings.reconnect_attempts,
            retry_delay=settings.reconnect_delay_seconds,
        )
        return NotificationSession(
            credential, channel=channel, fetcher=fetcher, mutator_factory=make_mutator
        )

    return ChannelLifecycleGate(credentials, make_session)


@asynccontextmanager
async def connect_notifications(
    credentials: CredentialSource,
    settings: ClientSettings | None = None,
) -> AsyncIterator[ChannelLifecycleGate]:
    """Run a gate for the lifetime of the ``async with`` block."""

    settings = settings or get_client_settings()
    async with httpx.AsyncClient(
        base_url=settings.api_base_url, timeout=settings.request_timeout_seconds
    ) as http_client:
        gate = build_gate(settings, credentials, http_client)
        try:
            await gate.sync()
            gate.start_watching(settings.credential_check_interval_seconds)
            yield gate
        finally:
            await gate.shutdown()


__all__ = [
    "AuthRequiredError",
    "ChannelLifecycleGate",
    "ChannelState",
    "ConnectionFailedError",
    "Credential",
    "CredentialSource",
    "FetchFailedError",
    "MalformedPayloadError",
    "NotificationClientError",
    "NotificationSession",
    "PushChannel",
    "PushTransport",
    "ReadStateMutator",
    "ReconciliationStore",
    "SnapshotFetcher",
    "Subscription",
    "TokenCredentialSource",
    "TransportError",
    "WebSocketTransport",
    "build_gate",
    "connect_notifications",
]
