"""FastAPI dependencies for the subscription store and event publisher.

Learn: Routes never touch Redis directly. They depend on get_registry /
get_publisher, which tests override (app.dependency_overrides) with an
in-memory store and a recording publisher.
"""

from fastapi import Depends

from boardwatch.realtime.pubsub import EventPublisher, get_redis
from boardwatch.subscriptions.registry import SubscriptionRegistry
from boardwatch.subscriptions.store import RedisSetStore, SetStore


def get_store() -> SetStore:
    return RedisSetStore(get_redis())


def get_registry(store: SetStore = Depends(get_store)) -> SubscriptionRegistry:
    return SubscriptionRegistry(store)


def get_publisher() -> EventPublisher:
    return EventPublisher(get_redis())
