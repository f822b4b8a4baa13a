"""Tests for the mark-as-read bridge."""

from __future__ import annotations

import httpx
import pytest
from jose import jwt

from secult_notify.client import (
    AuthRequiredError,
    FetchFailedError,
    ReadStateMutator,
    ReconciliationStore,
    TokenCredentialSource,
)

from tests.helpers import make_notification

pytestmark = pytest.mark.anyio


def _token(user_id: str = "user-a") -> str:
    return jwt.encode({"id": user_id, "email": f"{user_id}@example.com"}, "client-does-not-verify")


def _store() -> ReconciliationStore:
    store = ReconciliationStore("user-a")
    store.load_snapshot([make_notification("a", minutes=1), make_notification("b", minutes=2)])
    return store


async def test_success_updates_store_after_server_confirmation():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"message": "Notification marked as read"})

    store = _store()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test") as client:
        mutator = ReadStateMutator(client, TokenCredentialSource(_token()), store)
        await mutator.mark_as_read("a")
        await mutator.mark_as_read("a")

    assert store.get("a").is_read is True
    assert store.unread_count == 1
    assert [request.method for request in requests] == ["PATCH", "PATCH"]
    assert requests[0].url.path == "/api/notifications/a/read"
    assert requests[0].headers["Authorization"].startswith("Bearer ")


async def test_failure_leaves_store_untouched():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "Notificação não encontrada"})

    store = _store()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test") as client:
        mutator = ReadStateMutator(client, TokenCredentialSource(_token()), store)
        with pytest.raises(FetchFailedError, match="Notificação não encontrada") as exc_info:
            await mutator.mark_as_read("a")

    assert exc_info.value.status_code == 404
    assert store.get("a").is_read is False
    assert store.unread_count == 2


async def test_network_error_leaves_store_untouched():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    store = _store()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test") as client:
        mutator = ReadStateMutator(client, TokenCredentialSource(_token()), store)
        with pytest.raises(FetchFailedError):
            await mutator.mark_as_read("b")

    assert store.unread_count == 2


async def test_missing_credential_fails_without_network_call():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={})

    store = _store()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test") as client:
        mutator = ReadStateMutator(client, TokenCredentialSource(), store)
        with pytest.raises(AuthRequiredError) as exc_info:
            await mutator.mark_as_read("a")

    assert exc_info.value.kind == "auth_required"
    assert requests == []
    assert store.unread_count == 2


async def test_token_of_another_user_is_refused_without_network_call():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={})

    store = _store()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test") as client:
        mutator = ReadStateMutator(client, TokenCredentialSource(_token("user-b")), store)
        with pytest.raises(AuthRequiredError):
            await mutator.mark_as_read("a")

    assert requests == []
    assert store.get("a").is_read is False
