from __future__ import annotations  # Re-export request_client public API

from .client import HttpClient, HttpResponse, send
from .decoder import TIMEOUT_MESSAGE, request_json, request_model
from .errors import DecodeError, RequestClientError, RequestError
from .outcomes import ClientError, NetworkFailure, Outcome, RequestDescriptor, ServerError, Success, Timeout

__all__ = [
    "HttpClient",
    "HttpResponse",
    "send",
    "TIMEOUT_MESSAGE",
    "request_json",
    "request_model",
    "DecodeError",
    "RequestClientError",
    "RequestError",
    "ClientError",
    "NetworkFailure",
    "Outcome",
    "RequestDescriptor",
    "ServerError",
    "Success",
    "Timeout",
]
