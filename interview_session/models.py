"""Value types for a mock-interview practice session."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator

Phase = Literal["input", "questions", "mock", "complete"]
QuestionType = Literal["behavioral", "technical", "situational"]
QuestionTypeFilter = Literal["behavioral", "technical", "situational", "all"]
Difficulty = Literal["easy", "medium", "hard"]


class Question(BaseModel):
    """A generated interview question; identity is ``id``."""

    id: str
    text: str = Field(validation_alias=AliasChoices("question", "text"), serialization_alias="question")
    type: QuestionType
    difficulty: Difficulty
    category: str = ""

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("type", "difficulty", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class PendingFlags(BaseModel):
    """One in-flight call per action category."""

    generating: bool = False
    submitting_answer: bool = False
    fetching_follow_up: bool = False

    model_config = {"frozen": True}


class Session(BaseModel):
    """Live state of one practice run.

    Only the controller produces new values, always by replacing the whole
    session. ``version`` increases on every transition that starts or
    invalidates an async action and is never reset, so a late completion
    can be recognised as stale.
    """

    phase: Phase = "input"
    job_role: str = ""
    company: str = ""
    questions: Tuple[Question, ...] = ()
    question_set_id: Optional[str] = None
    current_index: int = Field(default=0, ge=0)
    current_answer: str = ""
    feedback: str = ""
    follow_up: str = ""
    show_feedback: bool = False
    elapsed_seconds: int = Field(default=0, ge=0)
    pending: PendingFlags = Field(default_factory=PendingFlags)
    error: str = ""
    version: int = 0

    model_config = {"frozen": True}

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= len(self.questions)


class UserContext(BaseModel):  # Signed-in identity forwarded as request headers
    email: str
    name: str = ""
    image: str = ""

    def headers(self) -> Dict[str, str]:
        return {
            "x-user-email": self.email,
            "x-user-name": self.name,
            "x-user-image": self.image,
        }


class GenerateRequest(BaseModel):
    """Form inputs for question generation."""

    job_role: str
    company: str
    difficulty: Difficulty = "medium"
    seniority: str = "mid-level"
    question_type: QuestionTypeFilter = "all"
    number_of_questions: int = Field(default=5, ge=1)

    def to_payload(self, user: Optional[UserContext] = None) -> Dict[str, Any]:
        return {
            "jobRole": self.job_role,
            "company": self.company,
            "difficulty": self.difficulty,
            "experience": self.seniority,
            "numberOfQuestions": self.number_of_questions,
            "questionType": self.question_type,
            "userId": user.email if user and user.email else "anonymous",
        }


class GeneratedQuestions(BaseModel):
    questions: List[Question] = Field(default_factory=list)
    question_set_id: Optional[str] = Field(default=None, validation_alias="questionSetId")

    @field_validator("questions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("question_set_id", mode="before")
    @classmethod
    def _coerce_set_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class FeedbackResponse(BaseModel):
    feedback: Optional[str] = None


class FollowUpResponse(BaseModel):
    follow_up_question: str = Field(validation_alias="followUpQuestion")


__all__ = [
    "Phase",
    "QuestionType",
    "QuestionTypeFilter",
    "Difficulty",
    "Question",
    "PendingFlags",
    "Session",
    "UserContext",
    "GenerateRequest",
    "GeneratedQuestions",
    "FeedbackResponse",
    "FollowUpResponse",
]
