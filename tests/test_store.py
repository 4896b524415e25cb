"""Set-store tests — MemorySetStore must behave like Redis where it matters,
and RedisSetStore must pass calls straight through."""

from unittest.mock import AsyncMock

import pytest

from boardwatch.subscriptions.store import RedisSetStore


@pytest.mark.asyncio
async def test_empty_set_disappears(store):
    await store.sadd("k", "a")
    assert await store.srem("k", "a") == 1
    assert await store.exists("k") is False


@pytest.mark.asyncio
async def test_sadd_counts_new_members_only(store):
    assert await store.sadd("k", "a", "b", "a") == 2
    assert await store.sadd("k", "a") == 0
    assert await store.smembers("k") == {"a", "b"}


@pytest.mark.asyncio
async def test_expire_missing_key_is_noop(store):
    assert await store.expire("missing", 10) is False
    assert await store.exists("missing") is False


@pytest.mark.asyncio
async def test_key_expires(store, clock):
    await store.sadd("k", "a")
    await store.expire("k", 10)
    clock.advance(9)
    assert await store.sismember("k", "a") is True
    clock.advance(1)
    assert await store.exists("k") is False
    assert await store.smembers("k") == set()
    assert store.keys() == []


@pytest.mark.asyncio
async def test_re_adding_after_expiry_starts_without_ttl(store, clock):
    await store.sadd("k", "a")
    await store.expire("k", 10)
    clock.advance(11)
    await store.sadd("k", "b")
    assert await store.smembers("k") == {"b"}
    assert store.ttl("k") is None


@pytest.mark.asyncio
async def test_delete(store):
    await store.sadd("k", "a")
    assert await store.delete("k") is True
    assert await store.delete("k") is False


@pytest.mark.asyncio
async def test_redis_store_delegates():
    redis = AsyncMock()
    redis.sadd.return_value = 1
    redis.smembers.return_value = {"s1"}
    redis.sismember.return_value = 1
    redis.exists.return_value = 0
    redis.expire.return_value = True
    redis.delete.return_value = 1
    store = RedisSetStore(redis)

    assert await store.sadd("k", "s1") == 1
    assert await store.smembers("k") == {"s1"}
    assert await store.sismember("k", "s1") is True
    assert await store.exists("k") is False
    assert await store.expire("k", 60) is True
    assert await store.delete("k") is True
    redis.expire.assert_awaited_once_with("k", 60)
