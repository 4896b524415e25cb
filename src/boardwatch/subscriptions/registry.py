"""Subscription registry — many-to-many index of sessions and resource URIs.

Learn: Every subscription is written twice:
  <prefix>:subscriptions:<base64(uri)>   set of session ids
  <prefix>:session:<session_id>:uris     set of uris, with a sliding TTL

The session key doubles as the session's liveness marker. When it
expires (no subscribe for 24h) or is deleted, the session is considered
gone, and get_subscribers() prunes it from any uri set it still sits in.
That lazy repair replaces a background sweeper.

subscribe() issues its writes one key at a time. A crash between them
leaves the two indexes disagreeing until the next read repairs the uri
side; this mirrors the deployed behaviour and is left as-is.

Store errors propagate untouched — retrying is the caller's decision.
"""

import base64

import structlog

from boardwatch.config import settings
from boardwatch.subscriptions.store import SetStore

logger = structlog.get_logger()


def uri_key(uri: str, prefix: str = "planka") -> str:
    """Redis key of the set of sessions subscribed to a uri."""
    encoded = base64.b64encode(uri.encode("utf-8")).decode("ascii")
    return f"{prefix}:subscriptions:{encoded}"


def session_key(session_id: str, prefix: str = "planka") -> str:
    """Redis key of the set of uris a session watches (its liveness key)."""
    return f"{prefix}:session:{session_id}:uris"


class SubscriptionRegistry:
    def __init__(
        self,
        store: SetStore,
        *,
        key_prefix: str | None = None,
        session_ttl: int | None = None,
    ):
        self.store = store
        self.key_prefix = key_prefix or settings.key_prefix
        self.session_ttl = session_ttl or settings.session_ttl_seconds

    def uri_key(self, uri: str) -> str:
        return uri_key(uri, self.key_prefix)

    def session_key(self, session_id: str) -> str:
        return session_key(session_id, self.key_prefix)

    # ─── Writes ────────────────────────────────────────────

    async def subscribe(self, session_id: str, uri: str) -> None:
        """Subscribe a session to a uri and refresh the session's TTL."""
        s_key = self.session_key(session_id)

        await self.store.sadd(self.uri_key(uri), session_id)
        await self.store.sadd(s_key, uri)
        await self.store.expire(s_key, self.session_ttl)

        logger.debug("registry.subscribed", session_id=session_id, uri=uri)

    async def unsubscribe(self, session_id: str, uri: str) -> None:
        """Remove a single subscription. No-op if it doesn't exist."""
        await self.store.srem(self.uri_key(uri), session_id)
        await self.store.srem(self.session_key(session_id), uri)

        logger.debug("registry.unsubscribed", session_id=session_id, uri=uri)

    async def remove_session(self, session_id: str) -> list[str]:
        """Drop every subscription a session holds.

        Returns the uris the session was subscribed to.
        """
        s_key = self.session_key(session_id)
        uris = sorted(await self.store.smembers(s_key))

        for uri in uris:
            await self.store.srem(self.uri_key(uri), session_id)

        await self.store.delete(s_key)

        logger.info("registry.session_removed", session_id=session_id, uris=len(uris))
        return uris

    # ─── Reads ─────────────────────────────────────────────

    async def get_subscribers(self, uri: str) -> list[str]:
        """Return the live sessions subscribed to a uri.

        Sessions whose liveness key is gone are removed from the uri set
        on the way out.
        """
        u_key = self.uri_key(uri)
        members = sorted(await self.store.smembers(u_key))

        active: list[str] = []
        stale: list[str] = []
        for session_id in members:
            if await self.store.exists(self.session_key(session_id)):
                active.append(session_id)
            else:
                stale.append(session_id)

        if stale:
            await self.store.srem(u_key, *stale)
            logger.info("registry.pruned_stale", uri=uri, sessions=stale)

        return active

    async def get_session_uris(self, session_id: str) -> list[str]:
        return sorted(await self.store.smembers(self.session_key(session_id)))

    async def is_subscribed(self, session_id: str, uri: str) -> bool:
        return await self.store.sismember(self.uri_key(uri), session_id)
