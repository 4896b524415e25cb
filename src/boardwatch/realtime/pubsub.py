"""Redis pub/sub — the shared channel between webhook ingest and dispatchers.

Learn: Redis pub/sub is fire-and-forget. If no dispatcher is listening,
the message is lost. That's acceptable here: events are invalidation
hints, and a client that missed one can always re-read the resource.

Channel naming: <prefix>.events (planka.events by default). Every
dispatcher instance subscribes to the same channel.
"""

import json
import time
from typing import Optional

import redis.asyncio as aioredis

from boardwatch.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Initialize the Redis connection pool."""
    global _redis
    _redis = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    # Verify connection
    await _redis.ping()
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


class EventPublisher:
    """Publishes resolved board events on the shared events channel."""

    def __init__(self, redis: aioredis.Redis, channel: str | None = None):
        self.redis = redis
        self.channel = channel or settings.events_channel

    async def publish(
        self,
        event_type: str,
        uris: list[str],
        timestamp: Optional[int] = None,
    ) -> dict:
        """Publish an event and return the message that was sent."""
        message = {
            "type": event_type,
            "uris": uris,
            "timestamp": timestamp if timestamp is not None else int(time.time()),
        }
        await self.redis.publish(self.channel, json.dumps(message))
        return message
