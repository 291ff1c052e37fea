"""Request descriptors and the tagged outcome of a single ``send``."""
from __future__ import annotations

import json
from typing import Annotated, Any, ClassVar, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from config.options import RequestOptions, default_options

Method = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


class RequestDescriptor(BaseModel):
    """Immutable description of one logical call, including its retry policy."""

    url: str
    method: Method = "POST"
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None
    options: RequestOptions = Field(default_factory=default_options)

    model_config = {"frozen": True}

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"url must be absolute http(s): {value!r}")
        return value

    def encoded_body(self) -> Optional[str]:
        if self.body is None:
            return None
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body)

    def request_headers(self) -> Dict[str, str]:
        headers = dict(self.headers)
        if self.body is not None and not any(key.lower() == "content-type" for key in headers):
            headers["Content-Type"] = "application/json"
        return headers


class Success(BaseModel):
    kind: Literal["success"] = "success"
    status_code: int
    body: str = ""

    retryable: ClassVar[bool] = False
    model_config = {"frozen": True}


class ClientError(BaseModel):
    kind: Literal["client_error"] = "client_error"
    status_code: int
    body: str = ""

    retryable: ClassVar[bool] = False
    model_config = {"frozen": True}


class ServerError(BaseModel):
    kind: Literal["server_error"] = "server_error"
    status_code: int
    body: str = ""

    retryable: ClassVar[bool] = True
    model_config = {"frozen": True}


class NetworkFailure(BaseModel):
    kind: Literal["network_failure"] = "network_failure"
    message: str

    retryable: ClassVar[bool] = True
    model_config = {"frozen": True}


class Timeout(BaseModel):
    kind: Literal["timeout"] = "timeout"

    retryable: ClassVar[bool] = False
    model_config = {"frozen": True}


Outcome = Annotated[
    Union[Success, ClientError, ServerError, NetworkFailure, Timeout],
    Field(discriminator="kind"),
]


def classify(status_code: int, body: str) -> Union[Success, ClientError, ServerError]:
    """Map an HTTP status onto an outcome.

    Anything outside 2xx-4xx (5xx, and the odd 1xx or non-standard code) is
    treated as a retryable server failure.
    """

    if 200 <= status_code <= 399:
        return Success(status_code=status_code, body=body)
    if 400 <= status_code <= 499:
        return ClientError(status_code=status_code, body=body)
    return ServerError(status_code=status_code, body=body)


__all__ = [
    "RequestDescriptor",
    "Success",
    "ClientError",
    "ServerError",
    "NetworkFailure",
    "Timeout",
    "Outcome",
    "classify",
]
