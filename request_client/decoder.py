from __future__ import annotations  # Typed JSON decoding on top of the request client

import asyncio
import json
import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .client import NETWORK_ERROR_MESSAGE, HttpClient, Sleep, send
from .errors import DecodeError, RequestError
from .outcomes import ClientError, NetworkFailure, RequestDescriptor, ServerError, Timeout



logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = (
    "Request timeout. The server might be waking up "
    "(this can take up to 60 seconds on free tier). Please try again."
)

T = TypeVar("T", bound=BaseModel)


async def request_json(
    descriptor: RequestDescriptor,
    *,
    client: Optional[HttpClient] = None,
    sleep: Sleep = asyncio.sleep,
) -> Any:
    """Send ``descriptor`` and return the parsed JSON body of a successful response.

    Raises:
        RequestError: the outcome was not a success; ``message`` is the text
            the UI shows.
        DecodeError: the success body was not valid JSON.
    """

    outcome = await send(descriptor, client=client, sleep=sleep)
    if isinstance(outcome, Timeout):
        raise RequestError(TIMEOUT_MESSAGE)
    if isinstance(outcome, NetworkFailure):
        raise RequestError(outcome.message or NETWORK_ERROR_MESSAGE)
    if isinstance(outcome, (ClientError, ServerError)):
        raise RequestError(error_message(outcome.status_code, outcome.body), status_code=outcome.status_code)
    try:
        return json.loads(outcome.body)
    except json.JSONDecodeError as exc:
        logger.error("Invalid JSON payload url=%s: %s", descriptor.url, exc)
        raise DecodeError("Response body was not valid JSON") from exc


async def request_model(
    descriptor: RequestDescriptor,
    schema: Type[T],
    *,
    client: Optional[HttpClient] = None,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Like :func:`request_json` but validates the body against ``schema``."""

    data = await request_json(descriptor, client=client, sleep=sleep)
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        logger.error("Response did not match %s url=%s: %s", schema.__name__, descriptor.url, exc)
        raise DecodeError(f"Response did not match {schema.__name__}") from exc


def error_message(status_code: int, body: str) -> str:
    """Pick the UI error text: body ``error``, then ``message``, then a generic status line."""

    try:
        data = json.loads(body) if body else {}
    except json.JSONDecodeError:
        data = {}
    if isinstance(data, dict):
        for key in ("error", "message"):
            value = data.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return f"HTTP error! status: {status_code}"


__all__ = ["TIMEOUT_MESSAGE", "error_message", "request_json", "request_model"]
