"""Webhooks API — incoming Planka webhook receiver.

Learn: The receiver reads the raw body (the HMAC covers the exact bytes
Planka sent), verifies the X-Webhook-Signature header, maps the event
to resource uris and publishes it for the dispatchers. The response
only acknowledges receipt — fan-out happens asynchronously.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from boardwatch.api.dependencies import get_publisher
from boardwatch.realtime.pubsub import EventPublisher
from boardwatch.schemas.subscription import WebhookAccepted
from boardwatch.services.webhook_service import (
    InvalidWebhookPayloadError,
    WebhookDisabledError,
    WebhookService,
    WebhookSignatureError,
)

router = APIRouter(prefix="/webhooks")


@router.post("/planka", response_model=WebhookAccepted)
async def receive_planka_webhook(
    request: Request,
    publisher: EventPublisher = Depends(get_publisher),
):
    """Receive a board event from Planka and queue it for dispatch."""
    svc = WebhookService(publisher)

    body = await request.body()
    signature = request.headers.get("X-Webhook-Signature")

    try:
        result = await svc.receive(body, signature)
    except WebhookDisabledError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WebhookSignatureError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except InvalidWebhookPayloadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return WebhookAccepted(status=result.status, type=result.event_type, uris=result.uris)
