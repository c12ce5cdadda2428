from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class InterviewStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"


class SessionRecordKind(str, Enum):
    PRACTICE = "practice"
    STANDALONE = "standalone"


VOICE_INTERVIEW_TYPE = "AI_VOICE"


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ApiEnvelope(BaseModel):
    success: bool = False
    data: Any = None
    message: str | None = None


class SessionRecord(ApiModel):
    id: str
    application_id: str | None = None
    candidate_id: str | None = None
    title: str | None = None
    type: str | None = None
    status: InterviewStatus | None = None
    access_code: str | None = None
    expires_at: datetime | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration_seconds: int | None = None


class SessionRecordCreate(ApiModel):
    application_id: str | None = None
    candidate_id: str | None = None
    title: str
    type: str = VOICE_INTERVIEW_TYPE
    status: InterviewStatus = InterviewStatus.IN_PROGRESS
    access_code: str
    expires_at: datetime
    started_at: datetime


class SessionRecordUpdate(ApiModel):
    status: InterviewStatus
    ended_at: datetime
    duration_seconds: int
    full_transcript: str
    overall_score: float | None = None
    ai_analysis_data: dict[str, Any] | None = None


class TurnRecordCreate(ApiModel):
    interview_id: str
    order_index: int
    question_text: str
    question_category: str | None = None
    answer_text: str | None = None


class CandidateIdentity(ApiModel):
    candidate_id: str
