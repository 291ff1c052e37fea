"""Mock-interview session controller.

Drives a practice run through ``input -> questions -> mock -> complete``.
Every state change replaces the whole :class:`Session` and is pushed to
subscribers; async actions stamp the session version when they start and
drop their result if the session has moved on by the time it arrives.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, List, NoReturn, Optional

from observability import log_event, span
from request_client import RequestClientError, RequestError

from . import transitions
from .api import InterviewApi
from .errors import InvalidTransitionError, ValidationError
from .models import GenerateRequest, Session, UserContext
from .timer import QuestionTimer


logger = logging.getLogger(__name__)

Listener = Callable[[Session], None]
TimerFactory = Callable[[Callable[[], None]], QuestionTimer]


def _failure_text(exc: RequestClientError, fallback: str) -> str:
    if isinstance(exc, RequestError) and exc.message:
        return exc.message
    return fallback


class SessionController:
    def __init__(
        self,
        api: InterviewApi,
        *,
        session_id: Optional[str] = None,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self.api = api
        self.session_id = session_id or str(uuid.uuid4())
        self._session = Session()
        self._listeners: List[Listener] = []
        self._timer = (timer_factory or QuestionTimer)(self._on_tick)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def timer_running(self) -> bool:
        return self._timer.running

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every new session value; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, session: Session) -> Session:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
        return session

    def _apply_if_current(self, stamp: int, action: str, transition: Callable[[Session], Session]) -> bool:
        if self._session.version != stamp:
            log_event(
                "stale_completion",
                self.session_id,
                action=action,
                version=stamp,
                phase=self._session.phase,
            )
            return False
        self._commit(transition(self._session))
        return True

    def _release(self, stamp: int, flag: str) -> None:
        # Clears a flag left set when the call ended without a result (e.g. cancellation).
        if self._session.version == stamp and getattr(self._session.pending, flag):
            self._commit(transitions.pending_cleared(self._session, flag))

    def _reject(self, message: str) -> NoReturn:
        self._commit(transitions.with_error(self._session, message))
        raise ValidationError(message)

    async def generate(self, request: GenerateRequest, user: Optional[UserContext] = None) -> None:
        if self._session.pending.generating:
            logger.info("generate ignored, request already in flight session=%s", self.session_id)
            return
        if self._session.phase != "input":
            raise InvalidTransitionError(f"cannot generate in phase {self._session.phase!r}")
        if not request.job_role.strip() or not request.company.strip():
            self._reject(transitions.FILL_BOTH_FIELDS)

        started = self._commit(transitions.generate_started(self._session, request))
        log_event("generate", self.session_id, phase=started.phase, version=started.version)
        try:
            with span(self.session_id, "generate"):
                result = await self.api.generate_questions(request, user)
        except RequestClientError as exc:
            message = _failure_text(exc, transitions.GENERATE_FAILED)
            log_event("generate_failed", self.session_id, level=logging.WARNING, error=message)
            self._apply_if_current(started.version, "generate", lambda s: transitions.generate_failed(s, message))
        else:
            self._apply_if_current(
                started.version,
                "generate",
                lambda s: transitions.generate_succeeded(s, result.questions, result.question_set_id),
            )
        finally:
            self._release(started.version, "generating")

    def start_mock(self) -> None:
        started = self._commit(transitions.mock_started(self._session))
        self._timer.start()
        log_event("start_mock", self.session_id, phase=started.phase, index=started.current_index)

    def set_answer(self, answer: str) -> None:
        self._commit(transitions.answer_changed(self._session, answer))

    async def submit_answer(self, answer: Optional[str] = None) -> None:
        if self._session.pending.submitting_answer:
            logger.info("submit ignored, request already in flight session=%s", self.session_id)
            return
        if self._session.phase != "mock" or self._session.show_feedback:
            raise InvalidTransitionError("no unanswered question to submit")
        effective = answer if answer is not None else self._session.current_answer
        if not effective.strip():
            self._reject(transitions.ANSWER_REQUIRED)
        question = self._session.current_question
        if question is None:
            raise InvalidTransitionError("no current question")
        if answer is not None:
            self.set_answer(answer)

        started = transitions.submit_started(self._session)
        # Stop before the call so the reported time is the moment of submission.
        self._timer.stop()
        self._commit(started)
        log_event(
            "submit_answer",
            self.session_id,
            index=started.current_index,
            version=started.version,
            elapsed=started.elapsed_seconds,
        )
        try:
            with span(self.session_id, "submit_answer", index=started.current_index):
                feedback = await self.api.generate_feedback(
                    question.text,
                    started.current_answer,
                    started.elapsed_seconds,
                )
        except RequestClientError as exc:
            message = _failure_text(exc, transitions.FEEDBACK_FAILED)
            log_event("submit_failed", self.session_id, level=logging.WARNING, error=message)
            self._apply_if_current(started.version, "submit_answer", lambda s: transitions.submit_failed(s, message))
        else:
            self._apply_if_current(
                started.version, "submit_answer", lambda s: transitions.submit_succeeded(s, feedback)
            )
        finally:
            self._release(started.version, "submitting_answer")

    async def request_follow_up(self) -> None:
        if self._session.pending.fetching_follow_up:
            logger.info("follow-up ignored, request already in flight session=%s", self.session_id)
            return
        started = transitions.follow_up_started(self._session)
        question = started.current_question
        if question is None:
            raise InvalidTransitionError("no current question")
        self._commit(started)
        try:
            with span(self.session_id, "follow_up", index=started.current_index):
                text = await self.api.generate_follow_up(question.text, started.current_answer)
        except RequestClientError as exc:
            logger.warning("follow-up failed session=%s: %s", self.session_id, exc)
            text = transitions.FOLLOW_UP_FALLBACK
        finally:
            self._release(started.version, "fetching_follow_up")
        self._apply_if_current(started.version, "follow_up", lambda s: transitions.follow_up_finished(s, text))

    def advance(self) -> None:
        updated = self._commit(transitions.advanced(self._session))
        if updated.phase == "mock":
            self._timer.start()
        else:
            self._timer.stop()
        log_event("advance", self.session_id, phase=updated.phase, index=updated.current_index)

    def reset(self) -> None:
        self._timer.stop()
        updated = self._commit(transitions.reset(self._session))
        log_event("reset", self.session_id, phase=updated.phase, version=updated.version)

    def close(self) -> None:
        self._timer.stop()

    def _on_tick(self) -> None:
        ticked = transitions.ticked(self._session)
        if ticked is not self._session:
            self._commit(ticked)


__all__ = ["SessionController"]
