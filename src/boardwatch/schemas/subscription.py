"""Pydantic schemas for subscriptions and webhook responses."""

from pydantic import BaseModel, Field


# ─── Subscriptions ────────────────────────────────────────


class SubscribeRequest(BaseModel):
    uri: str = Field(..., min_length=1)


class SubscriptionRead(BaseModel):
    session_id: str
    uri: str
    subscribed: bool


class SessionUrisRead(BaseModel):
    session_id: str
    uris: list[str]


class SessionRemovedRead(BaseModel):
    session_id: str
    removed: int


class SubscribersRead(BaseModel):
    uri: str
    sessions: list[str]


# ─── Webhooks ─────────────────────────────────────────────


class WebhookAccepted(BaseModel):
    status: str
    type: str
    uris: list[str] = Field(default_factory=list)
