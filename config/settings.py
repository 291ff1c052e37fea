"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    API_URL: str = Field(
        default="http://localhost:5002",
        validation_alias=AliasChoices("API_URL", "NEXT_PUBLIC_API_URL"),
    )

    # Generous timeout: the hosted backend can take close to a minute to wake.
    REQUEST_RETRIES: int = Field(default=3, ge=0)
    REQUEST_RETRY_DELAY_MS: int = Field(default=1000, gt=0)
    REQUEST_TIMEOUT_MS: int = Field(default=60000, gt=0)

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
