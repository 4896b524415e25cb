"""Settings validation tests."""

import pytest
from pydantic import ValidationError

from boardwatch.config import Settings


def test_defaults_match_deployed_key_layout():
    s = Settings()
    assert s.key_prefix == "planka"
    assert s.events_channel == "planka.events"
    assert s.uri_base == "planka://"
    assert s.session_ttl_seconds == 86400
    assert s.dispatch_retry_attempts == 0


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("BOARDWATCH_KEY_PREFIX", "acme")
    assert Settings().events_channel == "acme.events"


def test_ttl_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(session_ttl_seconds=0)


def test_production_requires_webhook_secret():
    with pytest.raises(ValidationError):
        Settings(environment="production", subscriptions_enabled=True, webhook_secret="")
    Settings(environment="production", subscriptions_enabled=True, webhook_secret="x")
