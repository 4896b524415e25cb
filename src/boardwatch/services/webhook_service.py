"""Planka webhook ingest — verify, map, publish.

Learn: Planka POSTs every board mutation to us as a webhook:
    {"type": "cardUpdate", "data": {"item": {...}, "prevListId": ...}}

When a payload arrives:
1. Reject it if subscriptions are disabled
2. Verify the HMAC signature (X-Webhook-Signature: sha256=<hex>)
   whenever a webhook secret is configured
3. Map type + data to the affected planka:// uris
4. Publish {type, uris, timestamp} on the events channel for the
   dispatchers — or skip publishing if nothing is affected
"""

import hashlib
import hmac
import json
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from boardwatch.config import settings
from boardwatch.events.mapper import map_to_uris
from boardwatch.realtime.pubsub import EventPublisher

logger = structlog.get_logger()


class WebhookDisabledError(Exception):
    pass


class WebhookSignatureError(Exception):
    pass


class InvalidWebhookPayloadError(Exception):
    pass


@dataclass
class WebhookResult:
    status: str  # "accepted" | "ignored"
    event_type: str
    uris: list[str] = field(default_factory=list)


def sign(secret: str, payload: bytes) -> str:
    """Signature header value for a payload."""
    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(secret: str, payload: bytes, signature: str) -> bool:
    """Verify an HMAC-SHA256 signature in constant time."""
    return hmac.compare_digest(sign(secret, payload), signature)


class WebhookService:
    def __init__(
        self,
        publisher: EventPublisher,
        *,
        enabled: Optional[bool] = None,
        secret: Optional[str] = None,
    ):
        self.publisher = publisher
        self.enabled = settings.subscriptions_enabled if enabled is None else enabled
        self.secret = settings.webhook_secret if secret is None else secret

    async def receive(self, body: bytes, signature: Optional[str]) -> WebhookResult:
        """Validate a raw webhook delivery and process it."""
        if not self.enabled:
            raise WebhookDisabledError("Subscriptions not enabled")

        if self.secret:
            if signature is None:
                raise WebhookSignatureError("Missing signature")
            if not verify_signature(self.secret, body, signature):
                logger.warning("webhook.signature_mismatch")
                raise WebhookSignatureError("Invalid signature")

        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            payload = {}

        if not isinstance(payload, dict) or not payload.get("type"):
            raise InvalidWebhookPayloadError("Missing event type")

        return await self.process(payload)

    async def process(self, payload: dict[str, Any]) -> WebhookResult:
        """Map a webhook payload to uris and publish it for dispatch."""
        event_type = str(payload.get("type") or "")
        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}

        uris = map_to_uris(event_type, data)
        if not uris:
            logger.debug("webhook.no_mapped_uris", event_type=event_type)
            return WebhookResult(status="ignored", event_type=event_type)

        await self.publisher.publish(event_type, uris)
        logger.debug("webhook.published", event_type=event_type, uris=uris)
        return WebhookResult(status="accepted", event_type=event_type, uris=uris)
