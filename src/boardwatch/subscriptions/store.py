"""Set-store backends for the subscription index.

Learn: The registry only needs seven single-key primitives, so the
backing store is a Protocol. Production wraps redis.asyncio; tests
and single-process development use MemorySetStore, which mimics the
Redis semantics the registry relies on (empty sets vanish, expired
keys vanish, EXPIRE on a missing key is a no-op).
"""

import time
from typing import Callable, Iterable, Optional, Protocol

import redis.asyncio as aioredis


class SetStore(Protocol):
    """Atomic-per-key operations the subscription registry depends on."""

    async def sadd(self, key: str, *members: str) -> int: ...

    async def srem(self, key: str, *members: str) -> int: ...

    async def smembers(self, key: str) -> set[str]: ...

    async def sismember(self, key: str, member: str) -> bool: ...

    async def exists(self, key: str) -> bool: ...

    async def expire(self, key: str, seconds: int) -> bool: ...

    async def delete(self, key: str) -> bool: ...


class RedisSetStore:
    """SetStore backed by a shared Redis server.

    The client must be created with decode_responses=True so members
    come back as str rather than bytes.
    """

    def __init__(self, redis: aioredis.Redis):
        self.redis = redis

    async def sadd(self, key: str, *members: str) -> int:
        return await self.redis.sadd(key, *members)

    async def srem(self, key: str, *members: str) -> int:
        return await self.redis.srem(key, *members)

    async def smembers(self, key: str) -> set[str]:
        return set(await self.redis.smembers(key))

    async def sismember(self, key: str, member: str) -> bool:
        return bool(await self.redis.sismember(key, member))

    async def exists(self, key: str) -> bool:
        return await self.redis.exists(key) > 0

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self.redis.expire(key, seconds))

    async def delete(self, key: str) -> bool:
        return await self.redis.delete(key) > 0


class MemorySetStore:
    """In-process SetStore with per-key expiry.

    Not shared between processes — use it for tests and local
    development only.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.monotonic
        self._sets: dict[str, set[str]] = {}
        self._deadlines: dict[str, float] = {}

    def _purge(self, key: str) -> None:
        deadline = self._deadlines.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._sets.pop(key, None)
            self._deadlines.pop(key, None)

    def _drop_if_empty(self, key: str) -> None:
        if not self._sets.get(key):
            self._sets.pop(key, None)
            self._deadlines.pop(key, None)

    def keys(self) -> list[str]:
        """Live keys, for test assertions."""
        for key in list(self._sets):
            self._purge(key)
        return sorted(self._sets)

    def ttl(self, key: str) -> Optional[float]:
        """Seconds until the key expires, or None if it has no expiry."""
        self._purge(key)
        deadline = self._deadlines.get(key)
        if deadline is None:
            return None
        return deadline - self._clock()

    async def sadd(self, key: str, *members: str) -> int:
        self._purge(key)
        current = self._sets.setdefault(key, set())
        added = [m for m in _unique(members) if m not in current]
        current.update(added)
        return len(added)

    async def srem(self, key: str, *members: str) -> int:
        self._purge(key)
        current = self._sets.get(key)
        if not current:
            return 0
        removed = [m for m in _unique(members) if m in current]
        current.difference_update(removed)
        self._drop_if_empty(key)
        return len(removed)

    async def smembers(self, key: str) -> set[str]:
        self._purge(key)
        return set(self._sets.get(key, ()))

    async def sismember(self, key: str, member: str) -> bool:
        self._purge(key)
        return member in self._sets.get(key, ())

    async def exists(self, key: str) -> bool:
        self._purge(key)
        return key in self._sets

    async def expire(self, key: str, seconds: int) -> bool:
        self._purge(key)
        if key not in self._sets:
            return False
        self._deadlines[key] = self._clock() + seconds
        return True

    async def delete(self, key: str) -> bool:
        self._purge(key)
        self._deadlines.pop(key, None)
        return self._sets.pop(key, None) is not None


def _unique(members: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(members))
