from __future__ import annotations  # Retry/timeout policy for backend requests

from pydantic import BaseModel, Field

from .settings import settings


class RequestOptions(BaseModel):  # Per-call retry and timeout policy
    retries: int = Field(default=3, ge=0)
    retry_delay_ms: int = Field(default=1000, gt=0)
    timeout_ms: int = Field(default=60000, gt=0)

    model_config = {"frozen": True}

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    def backoff_s(self, attempt: int) -> float:  # Linear backoff before attempt ``attempt + 1``
        return self.retry_delay_ms * (attempt + 1) / 1000.0


def default_options() -> RequestOptions:  # Options seeded from environment settings
    return RequestOptions(
        retries=settings.REQUEST_RETRIES,
        retry_delay_ms=settings.REQUEST_RETRY_DELAY_MS,
        timeout_ms=settings.REQUEST_TIMEOUT_MS,
    )
