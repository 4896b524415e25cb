"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with BOARDWATCH_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: key_prefix drives every Redis key and the events channel name.
The defaults match the keys the board integration already writes, so
changing them breaks interoperability with existing subscriptions.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via BOARDWATCH_* env vars."""

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Subscription index
    key_prefix: str = "planka"
    uri_scheme: str = "planka"
    session_ttl_seconds: int = 86400  # 24h sliding window

    # Webhook ingest
    subscriptions_enabled: bool = False
    webhook_secret: str = ""

    # Dispatcher retry policy for registry lookups (0 = no retry)
    dispatch_retry_attempts: int = 0
    dispatch_retry_backoff_seconds: float = 0.5

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_prefix": "BOARDWATCH_"}

    @property
    def events_channel(self) -> str:
        return f"{self.key_prefix}.events"

    @property
    def uri_base(self) -> str:
        return f"{self.uri_scheme}://"

    @model_validator(mode="after")
    def validate_settings(self):
        """Reject settings that would silently break subscriptions."""
        if self.session_ttl_seconds <= 0:
            raise ValueError("BOARDWATCH_SESSION_TTL_SECONDS must be positive")
        if self.dispatch_retry_attempts < 0:
            raise ValueError("BOARDWATCH_DISPATCH_RETRY_ATTEMPTS must be >= 0")
        if (
            self.environment != "development"
            and self.subscriptions_enabled
            and not self.webhook_secret
        ):
            raise ValueError(
                "BOARDWATCH_WEBHOOK_SECRET must be set when subscriptions are "
                "enabled in non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self


# Singleton — import this everywhere
settings = Settings()
