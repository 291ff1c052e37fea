from __future__ import annotations  # Session controller errors


class SessionError(RuntimeError):  # Base session controller error
    pass


class ValidationError(SessionError):  # Required input missing or blank; nothing was sent
    pass


class InvalidTransitionError(SessionError):  # Action not allowed in the current phase
    pass
