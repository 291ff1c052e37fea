from __future__ import annotations  # Resilient request client

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, Union

import httpx

from .outcomes import (
    ClientError,
    NetworkFailure,
    RequestDescriptor,
    ServerError,
    Success,
    Timeout,
    classify,
)


logger = logging.getLogger(__name__)  # Module logger setup

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection or try again in a moment."

Sleep = Callable[[float], Awaitable[None]]
SendOutcome = Union[Success, ClientError, ServerError, NetworkFailure, Timeout]


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    @property
    def text(self) -> str: ...


class HttpClient(Protocol):  # Minimal async HTTP client protocol
    async def request(
        self,
        method: str,
        url: str,
        *,
        content: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> HttpResponse: ...


async def send(
    descriptor: RequestDescriptor,
    *,
    client: Optional[HttpClient] = None,
    sleep: Sleep = asyncio.sleep,
) -> SendOutcome:
    """Issue ``descriptor`` with per-attempt timeout and linear retry backoff.

    Success and 4xx responses return immediately. A timeout is returned
    without further attempts. 5xx responses and transport failures are
    retried up to ``options.retries`` times, waiting
    ``retry_delay_ms * (attempt + 1)`` between attempts; the last retryable
    outcome is returned once attempts are exhausted.
    """

    if not isinstance(descriptor, RequestDescriptor):
        raise TypeError("send() expects a RequestDescriptor")
    opts = descriptor.options
    if client is not None:
        return await _send_with(descriptor, client, sleep)
    async with httpx.AsyncClient(timeout=opts.timeout_s) as owned:
        return await _send_with(descriptor, owned, sleep)


async def _send_with(descriptor: RequestDescriptor, client: HttpClient, sleep: Sleep) -> SendOutcome:
    opts = descriptor.options
    attempts = opts.retries + 1
    last: SendOutcome = NetworkFailure(message=NETWORK_ERROR_MESSAGE)
    for attempt in range(attempts):
        outcome = await _attempt(descriptor, client)
        if not outcome.retryable:
            if isinstance(outcome, Timeout):
                logger.warning(
                    "Request timed out url=%s attempt=%d/%d timeout_ms=%d",
                    descriptor.url,
                    attempt + 1,
                    attempts,
                    opts.timeout_ms,
                )
            return outcome
        last = outcome
        if attempt < opts.retries:
            delay = opts.backoff_s(attempt)
            logger.warning(
                "Request failed (%s), retrying in %dms url=%s attempt=%d/%d",
                _describe(outcome),
                int(delay * 1000),
                descriptor.url,
                attempt + 1,
                attempts,
            )
            await sleep(delay)
    logger.error("Request failed after %d attempts url=%s last=%s", attempts, descriptor.url, _describe(last))
    return last


async def _attempt(descriptor: RequestDescriptor, client: HttpClient) -> SendOutcome:  # One bounded call
    try:
        response = await asyncio.wait_for(
            client.request(
                descriptor.method,
                descriptor.url,
                content=descriptor.encoded_body(),
                headers=descriptor.request_headers(),
            ),
            timeout=descriptor.options.timeout_s,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException):
        return Timeout()
    except (httpx.HTTPError, OSError) as exc:
        return NetworkFailure(message=str(exc) or NETWORK_ERROR_MESSAGE)
    return classify(response.status_code, response.text)


def _describe(outcome: Optional[SendOutcome]) -> str:  # Short text for log lines
    if isinstance(outcome, (ServerError, ClientError, Success)):
        return str(outcome.status_code)
    if isinstance(outcome, NetworkFailure):
        return outcome.message
    return "timeout" if outcome is not None else "none"


__all__ = ["HttpClient", "HttpResponse", "NETWORK_ERROR_MESSAGE", "SendOutcome", "send"]
