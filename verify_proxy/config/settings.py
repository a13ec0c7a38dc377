"""Application settings using Pydantic BaseSettings."""

import logging
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "email-verification-proxy"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Upstream verification service
    upstream_url: str = "https://verify.gmass.co/verify"
    user_agent: str = "email-verification-proxy/1.0"
    timeout_ms: int = 30000

    # Queue
    rate_limit_delay_ms: int = 100
    # Reserved: the queue is drained by a single worker regardless of this value.
    max_concurrent_requests: int = 1

    # Batching
    batch_size: int = 50
    max_batch_emails: int = 1000

    # Shutdown
    shutdown_poll_interval_ms: int = 100
    shutdown_timeout_s: float | None = None

    # CORS
    allowed_origins: list[str] = ["*"]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_VALID_LOG_LEVELS}, got '{v}'")
        return upper

    @model_validator(mode="after")
    def validate_positive_values(self) -> "Settings":
        for field_name in (
            "timeout_ms",
            "batch_size",
            "max_batch_emails",
            "max_concurrent_requests",
            "shutdown_poll_interval_ms",
        ):
            value = getattr(self, field_name)
            if value <= 0:
                raise ValueError(f"{field_name} must be positive, got {value}")
        if self.rate_limit_delay_ms < 0:
            raise ValueError(f"rate_limit_delay_ms must not be negative, got {self.rate_limit_delay_ms}")
        if self.shutdown_timeout_s is not None and self.shutdown_timeout_s <= 0:
            raise ValueError(f"shutdown_timeout_s must be positive, got {self.shutdown_timeout_s}")
        return self

    @model_validator(mode="after")
    def warn_wildcard_origins(self) -> "Settings":
        if self.allowed_origins == ["*"]:
            logging.getLogger(__name__).warning(
                "allowed_origins is set to ['*'], consider restricting in production"
            )
        return self

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def rate_limit_delay_seconds(self) -> float:
        return self.rate_limit_delay_ms / 1000

    @property
    def shutdown_poll_interval_seconds(self) -> float:
        return self.shutdown_poll_interval_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
