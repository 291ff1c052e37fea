from __future__ import annotations  # Backend calls used by the session controller

import asyncio
import logging
from typing import Optional

from config import endpoints
from config.options import RequestOptions, default_options
from request_client import HttpClient, RequestDescriptor, RequestClientError, request_json, request_model
from request_client.client import Sleep

from .models import FeedbackResponse, FollowUpResponse, GeneratedQuestions, GenerateRequest, UserContext


logger = logging.getLogger(__name__)


class InterviewApi:  # Typed wrapper over the practice backend endpoints
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[HttpClient] = None,
        options: Optional[RequestOptions] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.base_url = base_url
        self.client = client
        self.options = options or default_options()
        self.sleep = sleep

    def descriptor(self, path: str, *, method: str = "POST", body=None, headers=None, **params) -> RequestDescriptor:
        return RequestDescriptor(
            url=endpoints.build_url(path, self.base_url, **params),
            method=method,
            headers=headers or {},
            body=body,
            options=self.options,
        )

    async def register_user(self, user: UserContext) -> None:
        body = {
            "email": user.email,
            "name": user.name,
            "image": user.image,
            "googleId": user.email,
        }
        await request_json(
            self.descriptor(endpoints.REGISTER_USER, body=body, headers=user.headers()),
            client=self.client,
            sleep=self.sleep,
        )

    async def generate_questions(self, request: GenerateRequest, user: Optional[UserContext] = None) -> GeneratedQuestions:
        if user is not None:
            try:
                await self.register_user(user)
            except RequestClientError as exc:
                logger.warning("User registration failed email=%s: %s", user.email, exc)
            path = endpoints.GENERATE_QUESTIONS_AUTHED
            headers = user.headers()
        else:
            path = endpoints.GENERATE_QUESTIONS
            headers = {}
        return await request_model(
            self.descriptor(path, body=request.to_payload(user), headers=headers),
            GeneratedQuestions,
            client=self.client,
            sleep=self.sleep,
        )

    async def generate_feedback(self, question: str, answer: str, time_spent: int) -> Optional[str]:
        body = {"question": question, "answer": answer, "timeSpent": time_spent}
        result = await request_model(
            self.descriptor(endpoints.GENERATE_FEEDBACK, body=body),
            FeedbackResponse,
            client=self.client,
            sleep=self.sleep,
        )
        return result.feedback

    async def generate_follow_up(self, original_question: str, answer: str) -> str:
        body = {"originalQuestion": original_question, "answer": answer}
        result = await request_model(
            self.descriptor(endpoints.GENERATE_FOLLOW_UP, body=body),
            FollowUpResponse,
            client=self.client,
            sleep=self.sleep,
        )
        return result.follow_up_question


__all__ = ["InterviewApi"]
