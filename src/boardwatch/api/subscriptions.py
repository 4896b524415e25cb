"""Subscriptions API — the surface session hosts use to manage watches.

Learn: A session host (MCP server, WebSocket gateway, ...) calls these
when a client subscribes to or leaves a resource, and DELETEs the whole
session on disconnect. Every successful subscribe slides the session's
24h liveness window forward.
"""

from fastapi import APIRouter, Depends, Query

from boardwatch.api.dependencies import get_registry
from boardwatch.schemas.subscription import (
    SessionRemovedRead,
    SessionUrisRead,
    SubscribeRequest,
    SubscribersRead,
    SubscriptionRead,
)
from boardwatch.subscriptions.registry import SubscriptionRegistry

router = APIRouter()


@router.put("/sessions/{session_id}/subscriptions", response_model=SubscriptionRead)
async def subscribe(
    session_id: str,
    body: SubscribeRequest,
    registry: SubscriptionRegistry = Depends(get_registry),
):
    """Subscribe a session to a resource uri (idempotent)."""
    await registry.subscribe(session_id, body.uri)
    return SubscriptionRead(session_id=session_id, uri=body.uri, subscribed=True)


@router.delete("/sessions/{session_id}/subscriptions", response_model=SubscriptionRead)
async def unsubscribe(
    session_id: str,
    uri: str = Query(..., min_length=1),
    registry: SubscriptionRegistry = Depends(get_registry),
):
    """Unsubscribe a session from a resource uri."""
    await registry.unsubscribe(session_id, uri)
    return SubscriptionRead(session_id=session_id, uri=uri, subscribed=False)


@router.get("/sessions/{session_id}/subscriptions", response_model=SessionUrisRead)
async def list_session_uris(
    session_id: str,
    registry: SubscriptionRegistry = Depends(get_registry),
):
    """List every uri a session watches."""
    uris = await registry.get_session_uris(session_id)
    return SessionUrisRead(session_id=session_id, uris=uris)


@router.get("/sessions/{session_id}/subscriptions/check", response_model=SubscriptionRead)
async def check_subscription(
    session_id: str,
    uri: str = Query(..., min_length=1),
    registry: SubscriptionRegistry = Depends(get_registry),
):
    subscribed = await registry.is_subscribed(session_id, uri)
    return SubscriptionRead(session_id=session_id, uri=uri, subscribed=subscribed)


@router.delete("/sessions/{session_id}", response_model=SessionRemovedRead)
async def remove_session(
    session_id: str,
    registry: SubscriptionRegistry = Depends(get_registry),
):
    """Drop all of a session's subscriptions (disconnect / logout)."""
    uris = await registry.remove_session(session_id)
    return SessionRemovedRead(session_id=session_id, removed=len(uris))


@router.get("/subscribers", response_model=SubscribersRead)
async def list_subscribers(
    uri: str = Query(..., min_length=1),
    registry: SubscriptionRegistry = Depends(get_registry),
):
    """Live sessions subscribed to a uri. Prunes expired sessions."""
    sessions = await registry.get_subscribers(uri)
    return SubscribersRead(uri=uri, sessions=sessions)
