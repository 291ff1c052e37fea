"""Helpers for loading a signed-in user's practice stats and interview history."""
from __future__ import annotations

import asyncio
from typing import List, Optional

from pydantic import BaseModel, Field

from config import endpoints
from request_client import RequestError, request_json
from interview_session.api import InterviewApi


class UserStats(BaseModel):
    totalInterviews: int = 0
    totalAnswers: int = 0
    averageRelevance: str = "0"
    averageClarity: str = "0"
    averageDepth: str = "0"
    averageScore: float = 0.0
    behavioralSkill: float = 0.0
    technicalSkill: float = 0.0
    communicationSkill: float = 0.0
    currentStreak: int = 0

    model_config = {"coerce_numbers_to_str": True}


class InterviewRecord(BaseModel):
    id: int
    jobRole: str
    company: str
    createdAt: str
    status: str
    overallScore: Optional[float] = None


class Dashboard(BaseModel):
    user_id: int
    stats: UserStats
    interviews: List[InterviewRecord] = Field(default_factory=list)


async def lookup_user_id(api: InterviewApi, email: str) -> int:
    """Resolve the backend user id for ``email``."""

    data = await request_json(
        api.descriptor(endpoints.USER_BY_EMAIL, method="GET", email=email),
        client=api.client,
        sleep=api.sleep,
    )
    user = data.get("user") if isinstance(data, dict) else None
    if not (isinstance(data, dict) and data.get("success") and isinstance(user, dict) and "id" in user):
        message = data.get("message") if isinstance(data, dict) else None
        raise RequestError(message or "Could not find user.")
    return int(user["id"])


async def load_dashboard(api: InterviewApi, email: str) -> Dashboard:
    """Fetch stats and history for ``email``; both requests run concurrently."""

    user_id = await lookup_user_id(api, email)
    stats_data, history_data = await asyncio.gather(
        request_json(
            api.descriptor(endpoints.USER_STATS, method="GET", user_id=user_id),
            client=api.client,
            sleep=api.sleep,
        ),
        request_json(
            api.descriptor(endpoints.INTERVIEW_HISTORY, method="GET", user_id=user_id),
            client=api.client,
            sleep=api.sleep,
        ),
    )
    return Dashboard(
        user_id=user_id,
        stats=UserStats.model_validate((stats_data or {}).get("stats") or {}),
        interviews=[InterviewRecord.model_validate(item) for item in (history_data or {}).get("interviews") or []],
    )


__all__ = ["Dashboard", "InterviewRecord", "UserStats", "load_dashboard", "lookup_user_id"]
