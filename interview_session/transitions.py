"""Pure session transitions.

Each function takes the current :class:`Session` and returns a new one; none
of them perform I/O. The controller sequences them around awaited calls.
"""
from __future__ import annotations

from typing import Iterable, Optional

from .errors import InvalidTransitionError
from .models import GenerateRequest, Question, Session

FILL_BOTH_FIELDS = "Please fill both fields"
ANSWER_REQUIRED = "Please provide an answer before submitting"
GENERATE_FAILED = "Failed to generate questions. Please try again."
FEEDBACK_FAILED = "Failed to get feedback. Please try again."
DEFAULT_FEEDBACK = "Good response! Keep practicing to improve further."
FOLLOW_UP_FALLBACK = "Sorry, I couldn't generate a follow-up. Please proceed to the next question."


def _pending(session: Session, **flags: bool) -> Session:
    return session.model_copy(update={"pending": session.pending.model_copy(update=flags)})


def _require_phase(session: Session, *phases: str) -> None:
    if session.phase not in phases:
        raise InvalidTransitionError(f"not allowed in phase {session.phase!r}")


def with_error(session: Session, message: str) -> Session:
    return session.model_copy(update={"error": message})


def generate_started(session: Session, request: GenerateRequest) -> Session:
    _require_phase(session, "input")
    updated = session.model_copy(
        update={
            "job_role": request.job_role,
            "company": request.company,
            "error": "",
            "version": session.version + 1,
        }
    )
    return _pending(updated, generating=True)


def generate_succeeded(session: Session, questions: Iterable[Question], question_set_id: Optional[str]) -> Session:
    updated = session.model_copy(
        update={
            "phase": "questions",
            "questions": tuple(questions),
            "question_set_id": question_set_id,
        }
    )
    return _pending(updated, generating=False)


def pending_cleared(session: Session, flag: str) -> Session:
    return _pending(session, **{flag: False})


def generate_failed(session: Session, message: str) -> Session:
    return _pending(with_error(session, message), generating=False)


def mock_started(session: Session) -> Session:
    _require_phase(session, "questions")
    if not session.questions:
        raise InvalidTransitionError("no questions to practice")
    return session.model_copy(
        update={
            "phase": "mock",
            "current_index": 0,
            "current_answer": "",
            "feedback": "",
            "follow_up": "",
            "show_feedback": False,
            "elapsed_seconds": 0,
            "error": "",
            "version": session.version + 1,
        }
    )


def answer_changed(session: Session, answer: str) -> Session:
    _require_phase(session, "mock")
    return session.model_copy(update={"current_answer": answer})


def ticked(session: Session) -> Session:
    if session.phase != "mock" or session.show_feedback:
        return session
    return session.model_copy(update={"elapsed_seconds": session.elapsed_seconds + 1})


def submit_started(session: Session) -> Session:
    _require_phase(session, "mock")
    if session.show_feedback:
        raise InvalidTransitionError("answer already submitted")
    updated = session.model_copy(update={"error": "", "version": session.version + 1})
    return _pending(updated, submitting_answer=True)


def submit_succeeded(session: Session, feedback: Optional[str]) -> Session:
    updated = session.model_copy(update={"feedback": feedback or DEFAULT_FEEDBACK, "show_feedback": True})
    return _pending(updated, submitting_answer=False)


def submit_failed(session: Session, message: str) -> Session:
    return _pending(with_error(session, message), submitting_answer=False)


def follow_up_started(session: Session) -> Session:
    _require_phase(session, "mock")
    if not session.show_feedback:
        raise InvalidTransitionError("follow-up requires feedback first")
    updated = session.model_copy(update={"follow_up": "", "version": session.version + 1})
    return _pending(updated, fetching_follow_up=True)


def follow_up_finished(session: Session, text: str) -> Session:
    return _pending(session.model_copy(update={"follow_up": text}), fetching_follow_up=False)


def advanced(session: Session) -> Session:
    _require_phase(session, "mock")
    if not session.show_feedback:
        raise InvalidTransitionError("cannot advance before feedback")
    if session.is_last_question:
        updated = session.model_copy(update={"phase": "complete", "version": session.version + 1})
        return _pending(updated, fetching_follow_up=False)
    updated = session.model_copy(
        update={
            "current_index": session.current_index + 1,
            "current_answer": "",
            "feedback": "",
            "follow_up": "",
            "show_feedback": False,
            "elapsed_seconds": 0,
            "error": "",
            "version": session.version + 1,
        }
    )
    return _pending(updated, fetching_follow_up=False)


def reset(session: Session) -> Session:
    return Session(version=session.version + 1)


__all__ = [
    "FILL_BOTH_FIELDS",
    "ANSWER_REQUIRED",
    "GENERATE_FAILED",
    "FEEDBACK_FAILED",
    "DEFAULT_FEEDBACK",
    "FOLLOW_UP_FALLBACK",
    "with_error",
    "generate_started",
    "generate_succeeded",
    "pending_cleared",
    "generate_failed",
    "mock_started",
    "answer_changed",
    "ticked",
    "submit_started",
    "submit_succeeded",
    "submit_failed",
    "follow_up_started",
    "follow_up_finished",
    "advanced",
    "reset",
]
