"""Notification descriptors and the transports that deliver them.

Delivery to a live session is somebody else's job (an MCP/WebSocket
host, for instance). The dispatcher only hands each descriptor to a
NotificationTransport; LoggingTransport is the default and just records
what would be pushed.
"""

from dataclasses import dataclass
from typing import Protocol

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Notification:
    """One resource-updated notice for one session."""
    session_id: str
    uri: str
    event_type: str
    timestamp: int

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "uri": self.uri,
            "eventType": self.event_type,
            "timestamp": self.timestamp,
        }


class NotificationTransport(Protocol):
    async def send(self, notification: Notification) -> None: ...


class LoggingTransport:
    """Logs each notification instead of delivering it."""

    async def send(self, notification: Notification) -> None:
        logger.info(
            "dispatcher.resource_updated",
            session_id=notification.session_id,
            uri=notification.uri,
            event_type=notification.event_type,
        )
