"""Process entry point tests — dispatcher worker and API lifespan.

Learn: Tests cover:
1. The worker's log level reaches structlog, not just stdlib logging
2. run() wires a dispatcher to Redis, stops on SIGINT/SIGTERM, logs stats
3. The API starts without Redis and reports degraded health
"""

import asyncio
import logging
import signal

import pytest
import structlog
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from structlog.testing import capture_logs

from boardwatch.config import settings
from boardwatch.dispatcher import main as dispatcher_main
from boardwatch.main import create_app, lifespan
from boardwatch.realtime import pubsub as pubsub_module


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    root.setLevel(level)


class FakePubSub:
    def __init__(self):
        self.subscribed: list[str] = []
        self.closed = False

    async def subscribe(self, *channels):
        self.subscribed.extend(channels)

    async def unsubscribe(self, *channels):
        pass

    async def get_message(self, ignore_subscribe_messages=False, timeout=0.0):
        await asyncio.sleep(0.01)
        return None

    async def aclose(self):
        self.closed = True


class FakeRedis:
    def __init__(self):
        self._pubsub = FakePubSub()
        self.pinged = False
        self.closed = False

    def pubsub(self):
        return self._pubsub

    async def ping(self):
        self.pinged = True
        return True

    async def aclose(self):
        self.closed = True


# ─── Worker logging ───────────────────────────────────────


@pytest.mark.asyncio
async def test_log_level_filters_structlog_output(monkeypatch, restore_logging, registry):
    monkeypatch.setattr(settings, "log_level", "WARNING")
    dispatcher_main.configure_logging()

    with capture_logs() as logs:
        await registry.subscribe("s1", "planka://boards/b1")
        await registry.remove_session("s1")
        structlog.get_logger().warning("dispatcher.still_visible")

    assert [e["event"] for e in logs] == ["dispatcher.still_visible"]


@pytest.mark.asyncio
async def test_debug_level_keeps_debug_lines(monkeypatch, restore_logging, registry):
    monkeypatch.setattr(settings, "log_level", "debug")
    dispatcher_main.configure_logging()

    with capture_logs() as logs:
        await registry.subscribe("s1", "planka://boards/b1")

    assert "registry.subscribed" in [e["event"] for e in logs]


# ─── Worker lifecycle ─────────────────────────────────────


@pytest.mark.asyncio
async def test_run_stops_on_signal_and_logs_stats(monkeypatch):
    redis = FakeRedis()
    monkeypatch.setattr(dispatcher_main.aioredis, "from_url", lambda *a, **kw: redis)
    loop = asyncio.get_running_loop()
    handlers = {}
    monkeypatch.setattr(loop, "add_signal_handler", lambda sig, cb: handlers.__setitem__(sig, cb))

    with capture_logs() as logs:
        task = asyncio.create_task(dispatcher_main.run())
        for _ in range(200):
            if redis._pubsub.subscribed:
                break
            await asyncio.sleep(0.01)
        handlers[signal.SIGTERM]()
        await asyncio.wait_for(task, timeout=2)

    assert set(handlers) == {signal.SIGINT, signal.SIGTERM}
    assert redis.pinged is True
    assert redis._pubsub.subscribed == [settings.events_channel]
    assert redis._pubsub.closed is True
    assert redis.closed is True
    exit_logs = [e for e in logs if e["event"] == "dispatcher.exit"]
    assert len(exit_logs) == 1
    assert exit_logs[0]["received"] == 0
    assert exit_logs[0]["errors"] == 0


# ─── API lifespan ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_api_starts_without_redis(monkeypatch):
    async def unreachable():
        raise RedisConnectionError("connection refused")

    monkeypatch.setattr(pubsub_module, "init_redis", unreachable)
    app = create_app()

    with capture_logs() as logs:
        async with lifespan(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    events = [e["event"] for e in logs]
    assert "boardwatch.redis_unavailable" in events
    assert events[-1] == "boardwatch.shutdown"
