from __future__ import annotations  # Re-export interview_session public API

from .api import InterviewApi
from .controller import SessionController
from .errors import InvalidTransitionError, SessionError, ValidationError
from .models import GenerateRequest, PendingFlags, Question, Session, UserContext
from .timer import QuestionTimer, format_time

__all__ = [
    "InterviewApi",
    "SessionController",
    "InvalidTransitionError",
    "SessionError",
    "ValidationError",
    "GenerateRequest",
    "PendingFlags",
    "Question",
    "Session",
    "UserContext",
    "QuestionTimer",
    "format_time",
]
