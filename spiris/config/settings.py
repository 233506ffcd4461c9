"""Client settings using Pydantic. No side effects at import time."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_AUTH_URL,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_BASE_URL,
    DEFAULT_BURST_SIZE,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_ELAPSED,
    DEFAULT_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TOKEN_FILE,
    DEFAULT_TOKEN_URL,
    MAX_PAGE_SIZE,
    RATE_LIMIT_PER_MINUTE,
)

if TYPE_CHECKING:
    from spiris.auth import OAuth2Config
    from spiris.client import ClientConfig
    from spiris.resilience import RetryPolicy


class Settings(BaseSettings):
    """Client settings with validation.

    Settings are loaded from ``SPIRIS_*`` environment variables and a .env file.
    Nothing is read at class definition time - .env is loaded only when
    Settings() is instantiated.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPIRIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === OAuth2 ===
    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str = "http://localhost:8080/callback"
    auth_url: str = DEFAULT_AUTH_URL
    token_url: str = DEFAULT_TOKEN_URL

    # === API ===
    base_url: str = DEFAULT_BASE_URL
    request_timeout: Annotated[float, Field(gt=0)] = DEFAULT_REQUEST_TIMEOUT

    # === Retry ===
    max_attempts: Annotated[int, Field(ge=1)] = DEFAULT_MAX_ATTEMPTS
    initial_delay: Annotated[float, Field(ge=0)] = DEFAULT_INITIAL_DELAY
    max_delay: Annotated[float, Field(ge=0)] = DEFAULT_MAX_DELAY
    backoff_multiplier: Annotated[float, Field(ge=1.0)] = DEFAULT_BACKOFF_MULTIPLIER
    max_elapsed: Annotated[float | None, Field(gt=0)] = DEFAULT_MAX_ELAPSED

    # === Rate Limits ===
    requests_per_minute: Annotated[int, Field(gt=0)] = RATE_LIMIT_PER_MINUTE
    burst_size: Annotated[int, Field(gt=0)] = DEFAULT_BURST_SIZE

    # === Pagination ===
    page_size: Annotated[int, Field(gt=0, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE

    # === Paths ===
    token_file: Path = DEFAULT_TOKEN_FILE

    @property
    def has_oauth(self) -> bool:
        """Check if OAuth2 client credentials are configured."""
        return bool(self.client_id and self.client_secret)

    def retry_policy(self) -> RetryPolicy:
        from spiris.resilience import RetryPolicy

        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            backoff_multiplier=self.backoff_multiplier,
            max_elapsed=self.max_elapsed,
        )

    def oauth2_config(self) -> OAuth2Config:
        from spiris.auth import OAuth2Config

        return OAuth2Config(
            client_id=self.client_id or "",
            client_secret=self.client_secret or "",
            redirect_uri=self.redirect_uri,
            auth_url=self.auth_url,
            token_url=self.token_url,
        )

    def client_config(self) -> ClientConfig:
        """Build a ClientConfig with a rate limiter sized from these settings."""
        from spiris.client import ClientConfig
        from spiris.resilience import RateLimiter

        return ClientConfig(
            base_url=self.base_url,
            timeout_seconds=self.request_timeout,
            retry_policy=self.retry_policy(),
            rate_limiter=RateLimiter.per_minute(self.requests_per_minute, burst=self.burst_size),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This is the recommended way to access settings to avoid
    repeated .env file parsing.
    """
    return Settings()
