"""Event dispatcher — fan board events out to subscribed sessions.

Learn: The dispatcher is a long-running worker (separate from the API
server). It SUBSCRIBEs to the shared events channel and, for each
message:
1. Decodes the JSON (bad input is logged and dropped)
2. Takes the message's pre-resolved `uris`, or maps type + payload
3. Asks the registry for live subscribers of each uri
4. Hands one Notification per (uri, session) to the transport

Key design decisions:
- One message at a time — events are handled in channel order
- Each uri is isolated — a registry failure on one uri is logged and
  the rest of the event still goes out
- handle_event() never raises, so one bad message can't kill the loop
- No retries by default; retry_attempts turns on a bounded retry
"""

import asyncio
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

import redis.asyncio as aioredis
import structlog

from boardwatch.config import settings
from boardwatch.dispatcher.transport import (
    LoggingTransport,
    Notification,
    NotificationTransport,
)
from boardwatch.events import types
from boardwatch.events.mapper import map_to_uris
from boardwatch.subscriptions.registry import SubscriptionRegistry

logger = structlog.get_logger()

# Message fields that are envelope, not event payload
_ENVELOPE_FIELDS = ("type", "uris", "timestamp")

Mapper = Callable[[str, Mapping[str, Any]], list[str]]


@dataclass
class DispatcherConfig:
    """Configuration for the event dispatcher."""
    channel: str = "planka.events"
    retry_attempts: int = 0
    retry_backoff: float = 0.5  # seconds between registry retries
    poll_timeout: float = 1.0  # max wait per pub/sub read, bounds stop() latency

    @classmethod
    def from_settings(cls) -> "DispatcherConfig":
        return cls(
            channel=settings.events_channel,
            retry_attempts=settings.dispatch_retry_attempts,
            retry_backoff=settings.dispatch_retry_backoff_seconds,
        )


@dataclass
class DispatcherStats:
    """Runtime statistics for monitoring."""
    received: int = 0
    dropped: int = 0
    notified: int = 0
    errors: int = 0
    started_at: Optional[datetime] = None


class EventDispatcher:
    def __init__(
        self,
        registry: SubscriptionRegistry,
        transport: Optional[NotificationTransport] = None,
        *,
        redis: Optional[aioredis.Redis] = None,
        config: Optional[DispatcherConfig] = None,
        mapper: Mapper = map_to_uris,
    ):
        self.registry = registry
        self.transport = transport or LoggingTransport()
        self.config = config or DispatcherConfig.from_settings()
        self.mapper = mapper
        self.stats = DispatcherStats()
        self._redis = redis
        self._running = False

    # ─── Channel loop ─────────────────────────────────────

    async def listen(self) -> None:
        """Consume the events channel until stop() is called."""
        if self._redis is None:
            raise RuntimeError("EventDispatcher.listen() needs a Redis client")

        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self.config.channel)

        self._running = True
        self.stats.started_at = datetime.now(timezone.utc)
        logger.info("dispatcher.listening", channel=self.config.channel)

        try:
            while self._running:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self.config.poll_timeout,
                )
                if not message:
                    await asyncio.sleep(0)
                    continue
                if message.get("type") != "message":
                    continue
                try:
                    await self.handle_event(message["data"])
                except Exception:
                    # handle_event guards itself; this is the last line of defence
                    logger.exception("dispatcher.handler_crashed")
                    self.stats.errors += 1
        finally:
            self._running = False
            await pubsub.unsubscribe(self.config.channel)
            await pubsub.aclose()
            logger.info("dispatcher.stopped", **self.get_stats())

    async def stop(self) -> None:
        """Ask the loop to exit after the message in flight."""
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def get_stats(self) -> dict:
        return {
            "received": self.stats.received,
            "dropped": self.stats.dropped,
            "notified": self.stats.notified,
            "errors": self.stats.errors,
            "started_at": self.stats.started_at.isoformat() if self.stats.started_at else None,
        }

    # ─── Message handling ─────────────────────────────────

    async def handle_event(self, raw_message: str | bytes) -> list[Notification]:
        """Dispatch one channel message. Never raises.

        Returns the notifications handed to the transport.
        """
        self.stats.received += 1

        event = self._decode(raw_message)
        if event is None:
            self.stats.dropped += 1
            return []

        event_type = str(event.get("type") or types.UNKNOWN)
        uris = self._resolve_uris(event_type, event)
        if not uris:
            logger.debug("dispatcher.no_uris", event_type=event_type)
            return []

        timestamp = _timestamp(event.get("timestamp"))

        sent: list[Notification] = []
        for uri in uris:
            session_ids = await self._subscribers_for(uri)
            if not session_ids:
                continue
            for session_id in session_ids:
                notification = Notification(
                    session_id=session_id,
                    uri=uri,
                    event_type=event_type,
                    timestamp=timestamp,
                )
                try:
                    await self.transport.send(notification)
                except Exception:
                    logger.exception(
                        "dispatcher.transport_failed",
                        session_id=session_id,
                        uri=uri,
                    )
                    self.stats.errors += 1
                    continue
                sent.append(notification)
                self.stats.notified += 1

        return sent

    def _decode(self, raw_message: str | bytes) -> Optional[dict]:
        try:
            event = json.loads(raw_message)
        except (TypeError, ValueError):
            logger.warning("dispatcher.invalid_json", message=_preview(raw_message))
            return None
        if not isinstance(event, dict):
            logger.warning("dispatcher.invalid_event", message=_preview(raw_message))
            return None
        return event

    def _resolve_uris(self, event_type: str, event: dict) -> list[str]:
        if "uris" in event:
            raw = event["uris"]
            if not isinstance(raw, list):
                logger.warning("dispatcher.invalid_uris", event_type=event_type)
                return []
            bad = [u for u in raw if not isinstance(u, str)]
            if bad:
                logger.warning(
                    "dispatcher.invalid_uri_entries",
                    event_type=event_type,
                    dropped=len(bad),
                )
            return list(dict.fromkeys(u for u in raw if isinstance(u, str) and u))

        payload = {k: v for k, v in event.items() if k not in _ENVELOPE_FIELDS}
        return self.mapper(event_type, payload)

    async def _subscribers_for(self, uri: str) -> Optional[list[str]]:
        """Registry lookup for one uri; None if it failed for good."""
        attempts = 1 + max(self.config.retry_attempts, 0)
        for attempt in range(1, attempts + 1):
            try:
                return await self.registry.get_subscribers(uri)
            except Exception:
                if attempt < attempts:
                    logger.warning(
                        "dispatcher.registry_retry",
                        uri=uri,
                        attempt=attempt,
                    )
                    await asyncio.sleep(self.config.retry_backoff)
                    continue
                logger.exception("dispatcher.registry_failed", uri=uri)
                self.stats.errors += 1
        return None


def _timestamp(value: Any) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    return int(time.time())


def _preview(raw: Any, limit: int = 200) -> str:
    text = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else str(raw)
    return text[:limit]
