"""Dispatcher entry point — run as a separate process.

Learn: The dispatcher is its own process, separate from the API server.
This provides crash isolation — if the dispatcher dies, webhook ingest
keeps accepting events (they're simply not fanned out until it's back).

Usage:
    python -m boardwatch.dispatcher.main

Or via the CLI:
    boardwatch-dispatcher
    boardwatch listen
"""

import asyncio
import logging
import signal

import redis.asyncio as aioredis
import structlog

from boardwatch.config import settings
from boardwatch.dispatcher.event_dispatcher import DispatcherConfig, EventDispatcher
from boardwatch.dispatcher.transport import LoggingTransport
from boardwatch.subscriptions.registry import SubscriptionRegistry
from boardwatch.subscriptions.store import RedisSetStore

logger = structlog.get_logger()


def configure_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # structlog's default logger ignores stdlib levels
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


async def run():
    """Run the dispatcher until interrupted."""
    redis = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    registry = SubscriptionRegistry(RedisSetStore(redis))
    dispatcher = EventDispatcher(
        registry,
        LoggingTransport(),
        redis=redis,
        config=DispatcherConfig.from_settings(),
    )

    # Handle shutdown signals
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(dispatcher.stop()))

    logger.info(
        "dispatcher.starting",
        channel=settings.events_channel,
        redis=settings.redis_url.split("@")[-1],
    )

    try:
        await redis.ping()
        await dispatcher.listen()
    except asyncio.CancelledError:
        pass
    finally:
        await redis.aclose()
        logger.info("dispatcher.exit", **dispatcher.get_stats())


def main():
    """CLI entry point."""
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
