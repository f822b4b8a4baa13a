"""Tests for the REST snapshot fetcher."""

from __future__ import annotations

import httpx
import pytest

from secult_notify.client import Credential, FetchFailedError, SnapshotFetcher
from secult_notify.domain.entities import Identity

from tests.helpers import at, notification_payload

pytestmark = pytest.mark.anyio

CREDENTIAL = Credential(token="token-a", identity=Identity(user_id="user-a"))


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")


async def test_fetch_returns_parsed_notifications_with_bearer_auth():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=[
                notification_payload("b", user_id=None, minutes=2),
                notification_payload("a", minutes=1, is_read=True),
            ],
        )

    async with _client(handler) as client:
        notifications = await SnapshotFetcher(client).fetch(CREDENTIAL)

    assert [n.id for n in notifications] == ["b", "a"]
    assert notifications[0].owner_id == "user-a"
    assert notifications[0].created_at == at(2)
    assert notifications[1].is_read is True
    assert requests[0].method == "GET"
    assert requests[0].url.path == "/api/notifications"
    assert requests[0].headers["Authorization"] == "Bearer token-a"


async def test_unread_only_is_forwarded_as_query_parameter():
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        assert await SnapshotFetcher(client).fetch(CREDENTIAL, unread_only=True) == []

    assert seen[0].params["unreadOnly"] == "true"


async def test_malformed_entries_are_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {"id": "missing-fields"},
                "garbage",
                notification_payload("ok", minutes=1),
                {**notification_payload("bad-date"), "created_at": "yesterday"},
            ],
        )

    async with _client(handler) as client:
        notifications = await SnapshotFetcher(client).fetch(CREDENTIAL)

    assert [n.id for n in notifications] == ["ok"]


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"error": "Erro ao listar notificações"}, "Erro ao listar notificações"),
        ({"detail": "Invalid credentials"}, "Invalid credentials"),
        (None, "Could not load notifications (HTTP 500)"),
    ],
)
async def test_error_responses_surface_server_message(body, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(500, text="boom")
        return httpx.Response(500, json=body)

    async with _client(handler) as client:
        with pytest.raises(FetchFailedError) as exc_info:
            await SnapshotFetcher(client).fetch(CREDENTIAL)

    assert str(exc_info.value) == expected
    assert exc_info.value.status_code == 500
    assert exc_info.value.kind == "fetch_failed"


async def test_network_failure_is_reported_as_fetch_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(FetchFailedError, match="connection refused"):
            await SnapshotFetcher(client).fetch(CREDENTIAL)


async def test_non_list_body_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": []})

    async with _client(handler) as client:
        with pytest.raises(FetchFailedError, match="expected a JSON array"):
            await SnapshotFetcher(client).fetch(CREDENTIAL)
