"""Shared helpers for the REST calls made by the push client."""

from __future__ import annotations

import httpx

from .errors import FetchFailedError

NOTIFICATIONS_PATH = "/api/notifications"


def error_from_response(response: httpx.Response, fallback: str) -> FetchFailedError:
    """Build a :class:`FetchFailedError` from a non-2xx ``response``.

    The server's ``error`` (or FastAPI ``detail``) message wins; otherwise
    ``fallback`` and the status code are used.
    """

    message: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        candidate = body.get("error") or body.get("detail")
        if isinstance(candidate, str) and candidate.strip():
            message = candidate
    if message is None:
        message = f"{fallback} (HTTP {response.status_code})"
    return FetchFailedError(message, status_code=response.status_code)


def error_from_exception(exc: httpx.HTTPError, fallback: str) -> FetchFailedError:
    """Wrap a transport level ``httpx`` failure."""

    detail = str(exc) or exc.__class__.__name__
    return FetchFailedError(f"{fallback}: {detail}")
