from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum

from voice_interview.core.config import DEFAULT_QUESTION_COUNT
from voice_interview.schemas import SessionRecord
from voice_interview.session.guard import FinalizationGuard
from voice_interview.transcript.accumulator import TranscriptAccumulator

NO_COMPANY_INFO = "No company information available"


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


class QuestionMode(str, Enum):
    PROVIDED = "provided"
    GENERATED = "generated"


def _clean_list(value) -> list[str]:
    if isinstance(value, str):
        value = value.splitlines()
    return [str(item).strip() for item in (value or []) if str(item or "").strip()]


@dataclass
class CallConfig:
    """What the voice assistant is told when the call starts."""
    candidate_name: str = "You"
    candidate_id: str | None = None
    role: str = ""
    interview_type: str = "technical"
    level: str = "mid"
    techstack: str = ""
    question_mode: QuestionMode = QuestionMode.GENERATED
    question_count: int = DEFAULT_QUESTION_COUNT
    questions: list[str] = field(default_factory=list)
    application_id: str | None = None
    company_info: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> CallConfig:
        data = dict(payload or {})
        try:
            mode = QuestionMode(str(data.get("questionMode") or QuestionMode.GENERATED.value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown question mode: {data.get('questionMode')!r}")

        techstack = data.get("techstack")
        if isinstance(techstack, (list, tuple)):
            techstack = ", ".join(_clean_list(techstack))

        try:
            question_count = int(data.get("questionCount") or DEFAULT_QUESTION_COUNT)
        except (TypeError, ValueError):
            raise ValueError(f"invalid question count: {data.get('questionCount')!r}")

        config = cls(
            candidate_name=str(data.get("username") or "You").strip() or "You",
            candidate_id=str(data.get("userId") or "").strip() or None,
            role=str(data.get("role") or "").strip(),
            interview_type=str(data.get("type") or "technical").strip(),
            level=str(data.get("level") or "mid").strip(),
            techstack=str(techstack or "").strip(),
            question_mode=mode,
            question_count=max(1, question_count),
            questions=_clean_list(data.get("questions")),
            application_id=str(data.get("applicationId") or "").strip() or None,
            company_info=str(data.get("companyInfo") or "").strip(),
        )
        if config.question_mode is QuestionMode.PROVIDED and not config.questions:
            raise ValueError("provided question mode requires at least one question")
        return config

    @property
    def is_practice(self) -> bool:
        return bool(self.application_id)

    def effective_question_count(self) -> int:
        if self.question_mode is QuestionMode.PROVIDED:
            return len(self.questions)
        return self.question_count

    def interview_title(self) -> str:
        label = "Practice interview" if self.is_practice else "Mock interview"
        return f"{label} - {self.role}" if self.role else label

    def to_variable_values(self) -> dict[str, str]:
        questions = ""
        if self.question_mode is QuestionMode.PROVIDED:
            questions = "\n".join(f"{index}. {text}" for index, text in enumerate(self.questions, start=1))
        return {
            "username": self.candidate_name,
            "userid": self.candidate_id or "",
            "role": self.role,
            "type": self.interview_type,
            "level": self.level,
            "techstack": self.techstack,
            "questionMode": self.question_mode.value,
            "questionCount": str(self.effective_question_count()),
            "questions": questions,
            "companyInfo": self.company_info or NO_COMPANY_INFO,
        }


@dataclass
class CallSession:
    """
    Everything one call owns. Single writer: the controller and its callbacks.
    `record` has at most two writers, the optimistic creator and the
    finalization fallback.
    """
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: SessionState = SessionState.IDLE
    transcript: TranscriptAccumulator = field(default_factory=TranscriptAccumulator)
    guard: FinalizationGuard = field(default_factory=FinalizationGuard)
    config: CallConfig = field(default_factory=CallConfig)
    record: SessionRecord | None = None
    elapsed_seconds: int = 0
    generation: int = 0
    assistant_speaking: bool = False
    muted: bool = False
