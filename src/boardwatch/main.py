"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan opens the shared Redis pool at startup and closes it
at shutdown. The dispatcher is NOT started here; it runs as its own
process (boardwatch-dispatcher).
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from boardwatch import __version__
from boardwatch.api import api_router
from boardwatch.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "boardwatch.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from boardwatch.realtime.pubsub import close_redis, init_redis
    try:
        await init_redis()
        logger.info("boardwatch.redis_connected", url=settings.redis_url.split("@")[-1])
    except Exception as e:
        logger.warning("boardwatch.redis_unavailable", error=str(e))
        # Health reports degraded; subscription routes answer 503 until Redis is back

    yield

    logger.info("boardwatch.shutdown")
    await close_redis()


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("boardwatch.store_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"detail": "Subscription store unavailable"},
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Boardwatch",
        description="Resource subscriptions and change notifications for Planka boards",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_exception_handler(RedisError, store_unavailable_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: boardwatch.main:app)
app = create_app()
