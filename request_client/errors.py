from __future__ import annotations  # Errors raised by the typed response decoder

from typing import Optional


class RequestClientError(RuntimeError):  # Base request layer error
    pass


class RequestError(RequestClientError):  # Non-success outcome surfaced to callers
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DecodeError(RequestClientError):  # Success body was not the expected JSON
    pass
