"""Subscriptions API tests.

Learn: These go through the real routes and registry; only the Redis
store is swapped for the in-memory one (see conftest.client).
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

BOARD = "planka://boards/b1"
CARD = "planka://cards/c1"


async def _subscribe(client, session_id, uri):
    r = await client.put(f"/api/v1/sessions/{session_id}/subscriptions", json={"uri": uri})
    assert r.status_code == 200
    return r.json()


@pytest.mark.asyncio
async def test_subscribe(client):
    data = await _subscribe(client, "s1", BOARD)
    assert data == {"session_id": "s1", "uri": BOARD, "subscribed": True}

    r = await client.get("/api/v1/sessions/s1/subscriptions/check", params={"uri": BOARD})
    assert r.json()["subscribed"] is True


@pytest.mark.asyncio
async def test_subscribe_requires_uri(client):
    r = await client.put("/api/v1/sessions/s1/subscriptions", json={"uri": ""})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_session_uris(client):
    await _subscribe(client, "s1", CARD)
    await _subscribe(client, "s1", BOARD)

    r = await client.get("/api/v1/sessions/s1/subscriptions")
    assert r.status_code == 200
    assert r.json() == {"session_id": "s1", "uris": [BOARD, CARD]}


@pytest.mark.asyncio
async def test_unsubscribe(client):
    await _subscribe(client, "s1", BOARD)

    r = await client.delete("/api/v1/sessions/s1/subscriptions", params={"uri": BOARD})
    assert r.status_code == 200
    assert r.json()["subscribed"] is False

    r = await client.get("/api/v1/subscribers", params={"uri": BOARD})
    assert r.json() == {"uri": BOARD, "sessions": []}


@pytest.mark.asyncio
async def test_list_subscribers(client):
    await _subscribe(client, "s1", BOARD)
    await _subscribe(client, "s2", BOARD)
    await _subscribe(client, "s3", CARD)

    r = await client.get("/api/v1/subscribers", params={"uri": BOARD})
    assert r.status_code == 200
    assert r.json()["sessions"] == ["s1", "s2"]


@pytest.mark.asyncio
async def test_expired_sessions_are_not_listed(client, clock):
    await _subscribe(client, "s1", BOARD)
    clock.advance(86400 + 1)
    await _subscribe(client, "s2", BOARD)

    r = await client.get("/api/v1/subscribers", params={"uri": BOARD})
    assert r.json()["sessions"] == ["s2"]


@pytest.mark.asyncio
async def test_remove_session(client):
    await _subscribe(client, "s1", BOARD)
    await _subscribe(client, "s1", CARD)

    r = await client.delete("/api/v1/sessions/s1")
    assert r.status_code == 200
    assert r.json() == {"session_id": "s1", "removed": 2}

    r = await client.get("/api/v1/sessions/s1/subscriptions")
    assert r.json()["uris"] == []
    r = await client.get("/api/v1/subscribers", params={"uri": CARD})
    assert r.json()["sessions"] == []


@pytest.mark.asyncio
async def test_store_outage_returns_503(client, store):
    store.smembers = AsyncMock(side_effect=RedisConnectionError("redis down"))

    r = await client.get("/api/v1/subscribers", params={"uri": BOARD})
    assert r.status_code == 503
    assert r.json()["detail"] == "Subscription store unavailable"
