"""Backend endpoint paths and URL helpers."""
from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from .settings import settings

GENERATE_QUESTIONS = "/api/generate-questions"
GENERATE_QUESTIONS_AUTHED = "/api/db/generate-questions"
GENERATE_FEEDBACK = "/api/generate-feedback"
GENERATE_FOLLOW_UP = "/api/generate-follow-up"
REGISTER_USER = "/api/db/auth/user"
USER_BY_EMAIL = "/api/db/users/by-email/{email}"
USER_STATS = "/api/user-stats/{user_id}"
INTERVIEW_HISTORY = "/api/interview-history/{user_id}"


def build_url(path: str, base_url: Optional[str] = None, **params: object) -> str:
    """Join ``path`` onto the configured API base, filling ``{}`` placeholders."""

    base = (base_url or settings.API_URL).rstrip("/")
    if params:
        path = path.format(**{key: quote(str(value), safe="@") for key, value in params.items()})
    return f"{base}{path}"


__all__ = [
    "GENERATE_QUESTIONS",
    "GENERATE_QUESTIONS_AUTHED",
    "GENERATE_FEEDBACK",
    "GENERATE_FOLLOW_UP",
    "REGISTER_USER",
    "USER_BY_EMAIL",
    "USER_STATS",
    "INTERVIEW_HISTORY",
    "build_url",
]
