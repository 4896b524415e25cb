"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and
the shared Redis store is reachable. Redis being down degrades the
service (no subscriptions, no fan-out) but doesn't stop the server.
"""

from fastapi import APIRouter

from boardwatch import __version__
from boardwatch.realtime.pubsub import get_redis

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    status = "healthy" if all(
        v == "ok" for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {"status": status, **checks}
