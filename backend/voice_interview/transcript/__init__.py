from voice_interview.transcript.accumulator import TranscriptAccumulator, serialize_transcript
from voice_interview.transcript.assessment import AssessmentPayload, extract_assessment
from voice_interview.transcript.models import InterviewTurn, TranscriptMessage
from voice_interview.transcript.turns import TurnExtractor, extract_turns

__all__ = [
    "AssessmentPayload",
    "InterviewTurn",
    "TranscriptAccumulator",
    "TranscriptMessage",
    "TurnExtractor",
    "extract_assessment",
    "extract_turns",
    "serialize_transcript",
]
