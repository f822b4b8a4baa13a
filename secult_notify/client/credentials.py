"""Credential lookup for the push client.

The client never verifies token signatures (the server does); it only reads
the claims to learn who is logged in and whether the token already expired.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from jose import JWTError, jwt

from secult_notify.domain.entities import Identity

from .listeners import ListenerRegistry, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """A bearer token together with the identity it carries."""

    token: str
    identity: Identity

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class CredentialSource(Protocol):
    """Anything able to tell which credential is current."""

    def current(self) -> Credential | None:
        ...

    def subscribe(self, listener: Callable[[Credential | None], None]) -> Subscription:
        """Call ``listener`` with the new credential after every login or logout."""
        ...


def decode_credential(token: str, *, now: float | None = None) -> Credential | None:
    """Return the credential for ``token`` or ``None`` when it is unusable."""

    try:
        claims = jwt.get_unverified_claims(token)
        identity = Identity.from_claims(claims)
    except (JWTError, ValueError) as exc:
        logger.warning("Discarding undecodable token: %s", exc)
        return None

    expires_at = claims.get("exp")
    if expires_at is not None:
        current_time = time.time() if now is None else now
        try:
            expired = float(expires_at) < current_time
        except (TypeError, ValueError):
            logger.warning("Discarding token with invalid exp claim %r", expires_at)
            return None
        if expired:
            logger.info("Token for user %s expired", identity.user_id)
            return None
    return Credential(token=token, identity=identity)


class TokenCredentialSource:
    """In-memory credential holder; subscribers hear about every login and logout."""

    def __init__(self, token: str | None = None, *, clock: Callable[[], float] = time.time) -> None:
        self._token = token
        self._clock = clock
        self._changes: ListenerRegistry[Credential | None] = ListenerRegistry("credentials")

    def subscribe(self, listener: Callable[[Credential | None], None]) -> Subscription:
        return self._changes.add(listener)

    def login(self, token: str) -> None:
        self._token = token
        self._changes.emit(self.current())

    def logout(self) -> None:
        self._token = None
        self._changes.emit(None)

    def current(self) -> Credential | None:
        if not self._token:
            return None
        credential = decode_credential(self._token, now=self._clock())
        if credential is None:
            # Same as the browser client: an expired or broken token is forgotten.
            self._token = None
        return credential


__all__ = [
    "Credential",
    "CredentialSource",
    "TokenCredentialSource",
    "decode_credential",
]
