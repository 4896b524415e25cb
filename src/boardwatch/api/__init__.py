"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.

Learn: Subscriber authentication is deliberately not handled here —
session hosts sit in front of this service and own their clients'
identity. The webhook receiver authenticates Planka via HMAC instead.
"""

from fastapi import APIRouter

from boardwatch.api.health import router as health_router
from boardwatch.api.subscriptions import router as subscriptions_router
from boardwatch.api.webhooks import router as webhooks_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(subscriptions_router, tags=["subscriptions"])
api_router.include_router(webhooks_router, tags=["webhooks"])
