from voice_interview.session.controller import CallSessionController
from voice_interview.session.events import parse_call_event
from voice_interview.session.finalizer import FinalizationPipeline, FinalizationResult
from voice_interview.session.guard import FinalizationGuard
from voice_interview.session.models import CallConfig, CallSession, QuestionMode, SessionState
from voice_interview.session.records import RecordTrigger, SessionRecordResolver

__all__ = [
    "CallConfig",
    "CallSession",
    "CallSessionController",
    "FinalizationGuard",
    "FinalizationPipeline",
    "FinalizationResult",
    "QuestionMode",
    "RecordTrigger",
    "SessionRecordResolver",
    "SessionState",
    "parse_call_event",
]
