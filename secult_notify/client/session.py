"""Session-scoped notification state and its binding to the current credential."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from secult_notify.domain.entities import Notification

from .channel import PushChannel
from .credentials import Credential, CredentialSource
from .errors import AuthRequiredError, FetchFailedError, NotificationClientError
from .listeners import Subscription
from .mutator import ReadStateMutator
from .snapshot import SnapshotFetcher
from .store import ReconciliationStore

logger = logging.getLogger(__name__)

MutatorFactory = Callable[[ReconciliationStore], ReadStateMutator]


class NotificationSession:
    """Everything that belongs to one logged-in identity.

    A session is started once and closed once; a new login always gets a new
    session, so nothing of a previous identity can leak into its store.
    """

    def __init__(
        self,
        credential: Credential,
        *,
        channel: PushChannel,
        fetcher: SnapshotFetcher,
        mutator_factory: MutatorFactory,
    ) -> None:
        self.credential = credential
        self.store = ReconciliationStore(credential.identity.user_id)
        self.snapshot_error: FetchFailedError | None = None
        self._channel = channel
        self._fetcher = fetcher
        self._mutator = mutator_factory(self.store)
        self._pending: list[Notification] = []
        self._subscription: Subscription | None = None
        self._live = False
        self._closed = False

    @property
    def owner_id(self) -> str:
        return self.credential.identity.user_id

    @property
    def channel(self) -> PushChannel:
        return self._channel

    @property
    def live(self) -> bool:
        """``True`` once the snapshot is loaded and pushes apply directly."""

        return self._live

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Open the channel, load the snapshot, then replay early pushes.

        Pushes received while the snapshot request is in flight are held back
        and applied right after it, so they are neither lost nor overwritten.
        """

        if self._subscription is not None:
            raise RuntimeError("Notification session already started")
        self._subscription = self._channel.subscribe(self._on_push)
        await self._channel.open(self.credential.token)

        try:
            snapshot = await self._fetcher.fetch(self.credential)
        except FetchFailedError as exc:
            logger.warning("Initial notifications for %s unavailable: %s", self.owner_id, exc)
            self.snapshot_error = exc
            snapshot = []

        if self._closed:
            return
        self.store.load_snapshot(snapshot)
        pending, self._pending = self._pending, []
        for notification in pending:
            self.store.apply_push(notification)
        self._live = True
        logger.debug(
            "Session for %s live with %s buffered pushes replayed", self.owner_id, len(pending)
        )

    async def mark_as_read(self, notification_id: str) -> None:
        if self._closed:
            raise AuthRequiredError()
        await self._mutator.mark_as_read(notification_id)

    def revoke(self) -> None:
        """Silence the channel and drop local state without awaiting anything.

        Listeners are detached before the store is cleared. ``close()`` later
        releases the transport.
        """

        if self._closed:
            return
        self._closed = True
        if self._subscription is not None:
            self._subscription.cancel()
        self._channel.detach()
        self._pending.clear()
        self.store.clear()

    async def close(self) -> None:
        """Stop listening, close the channel and drop local state."""

        self.revoke()
        await self._channel.close()

    def _on_push(self, notification: Notification) -> None:
        if self._closed:
            return
        if not self._live:
            self._pending.append(notification)
            return
        self.store.apply_push(notification)


SessionFactory = Callable[[Credential], NotificationSession]


class ChannelLifecycleGate:
    """Keep a session open exactly while a valid identity is present.

    Login and logout reach the gate through the credential source's change
    notifications. A session whose identity went away is revoked right in
    that callback; its transport is released by the ``sync()`` scheduled
    next.
    """

    def __init__(self, credentials: CredentialSource, session_factory: SessionFactory) -> None:
        self._credentials = credentials
        self._session_factory = session_factory
        self._session: NotificationSession | None = None
        self._retired: list[NotificationSession] = []
        self._lock = asyncio.Lock()
        self._watch_task: asyncio.Task[None] | None = None
        self._sync_tasks: set[asyncio.Task[NotificationSession | None]] = set()
        self._credential_subscription = credentials.subscribe(self._on_credentials_changed)

    @property
    def session(self) -> NotificationSession | None:
        """The session of the identity that is logged in right now, if any."""

        session = self._session
        if session is None or not self._owns(session, self._credentials.current()):
            return None
        return session

    @property
    def watching(self) -> bool:
        return self._watch_task is not None and not self._watch_task.done()

    async def sync(self) -> NotificationSession | None:
        """Align the session with the credential source.

        A session whose identity disappeared or changed is fully closed before
        a session for the new identity is created.
        """

        async with self._lock:
            retired, self._retired = self._retired, []
            for session in retired:
                await session.close()

            credential = self._credentials.current()
            current = self._session
            if current is not None and not self._owns(current, credential):
                logger.info("Closing notification session for %s", current.owner_id)
                self._session = None
                await current.close()

            if credential is not None and self._session is None:
                logger.info("Opening notification session for %s", credential.identity.user_id)
                session = self._session_factory(credential)
                self._session = session
                await session.start()
            return self._session

    def start_watching(self, interval: float) -> None:
        """Re-check the credential every ``interval`` seconds.

        Only one watcher runs per gate; calling this again while it runs does
        nothing.
        """

        if self.watching:
            return
        self._watch_task = asyncio.get_running_loop().create_task(
            self._watch(interval), name="credential-watch"
        )

    async def stop_watching(self) -> None:
        task, self._watch_task = self._watch_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def mark_as_read(self, notification_id: str) -> None:
        session = self.session
        if session is None:
            raise AuthRequiredError()
        await session.mark_as_read(notification_id)

    async def shutdown(self) -> None:
        """Stop reacting to the credential source and close every session."""

        self._credential_subscription.cancel()
        await self.stop_watching()
        pending = list(self._sync_tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        async with self._lock:
            sessions, self._retired = self._retired, []
            if self._session is not None:
                sessions.append(self._session)
                self._session = None
            for session in sessions:
                await session.close()

    @staticmethod
    def _owns(session: NotificationSession, credential: Credential | None) -> bool:
        return credential is not None and credential.identity.user_id == session.owner_id

    def _on_credentials_changed(self, credential: Credential | None) -> None:
        session = self._session
        if session is not None and not self._owns(session, credential):
            logger.info("Identity changed, revoking notification session for %s", session.owner_id)
            self._session = None
            session.revoke()
            self._retired.append(session)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside the event loop the next sync() catches up.
            return
        task = loop.create_task(self.sync(), name="credential-sync")
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_finished)

    def _sync_finished(self, task: asyncio.Task[NotificationSession | None]) -> None:
        self._sync_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Notification session sync failed", exc_info=exc)

    async def _watch(self, interval: float) -> None:
        while True:
            try:
                await self.sync()
            except NotificationClientError as exc:
                logger.warning("Credential check failed: %s", exc)
            except Exception:
                logger.exception("Unexpected error while syncing the notification session")
            await asyncio.sleep(interval)


__all__ = [
    "ChannelLifecycleGate",
    "MutatorFactory",
    "SessionFactory",
    "NotificationSession",
]
