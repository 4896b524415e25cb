"""Test fixtures — in-memory subscription store, recording collaborators.

Learn: Nothing here needs a running Redis:

1. MemorySetStore stands in for Redis. It takes an injectable clock, so
   TTL expiry is tested by advancing a FakeClock instead of sleeping.
2. RecordingPublisher / RecordingTransport capture what would have gone
   out over pub/sub or to a session.
3. The HTTP client overrides get_store / get_publisher, so the real
   routes and registry run against the in-memory store.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from boardwatch.api.dependencies import get_publisher, get_store
from boardwatch.main import app
from boardwatch.subscriptions.registry import SubscriptionRegistry
from boardwatch.subscriptions.store import MemorySetStore


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingPublisher:
    def __init__(self):
        self.published: list[dict] = []

    async def publish(self, event_type, uris, timestamp=None):
        message = {"type": event_type, "uris": uris, "timestamp": timestamp or 0}
        self.published.append(message)
        return message


class RecordingTransport:
    def __init__(self, fail_for: set[str] | None = None):
        self.sent = []
        self.fail_for = fail_for or set()

    async def send(self, notification):
        if notification.session_id in self.fail_for:
            raise ConnectionError(f"session {notification.session_id} went away")
        self.sent.append(notification)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return MemorySetStore(clock=clock)


@pytest.fixture()
def registry(store):
    return SubscriptionRegistry(store, key_prefix="planka", session_ttl=86400)


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def publisher():
    return RecordingPublisher()


@pytest_asyncio.fixture()
async def client(store, publisher):
    """HTTP client with the store and publisher overridden for testing."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_publisher] = lambda: publisher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
