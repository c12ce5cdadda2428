import pytest

from voice_interview.session.events import (
    AssistantSpeechEnded,
    AssistantSpeechStarted,
    CallEnded,
    CallFailed,
    CallStarted,
    TranscriptReceived,
    parse_call_event,
)
from voice_interview.session.models import CallConfig, QuestionMode


def test_parse_lifecycle_events():
    assert parse_call_event({"type": "call-start"}) == CallStarted()
    assert parse_call_event({"type": "call-end"}) == CallEnded()
    assert parse_call_event({"type": "speech-start"}) == AssistantSpeechStarted()
    assert parse_call_event({"type": "speech-end"}) == AssistantSpeechEnded()


def test_parse_transcript_envelope_and_flat_form():
    wrapped = {
        "type": "message",
        "message": {"type": "transcript", "role": "assistant", "transcriptType": "final", "transcript": "Q1: Hi"},
    }
    flat = {"type": "transcript", "role": "user", "transcriptType": "partial", "transcript": "I th"}

    assert parse_call_event(wrapped) == TranscriptReceived(role="assistant", text="Q1: Hi", is_final=True)
    assert parse_call_event(flat) == TranscriptReceived(role="user", text="I th", is_final=False)


def test_parse_error_event_extracts_cause():
    assert parse_call_event({"type": "error", "error": {"message": "ice failed"}}) == CallFailed(cause="ice failed")
    assert parse_call_event({"type": "error", "error": "boom"}) == CallFailed(cause="boom")


def test_parse_ignores_unknown_shapes():
    assert parse_call_event({"type": "volume-level", "volume": 0.3}) is None
    assert parse_call_event({"type": "message", "message": {"type": "function-call"}}) is None
    assert parse_call_event({"type": "transcript", "role": "robot", "transcript": "x"}) is None
    assert parse_call_event("call-start") is None


def test_call_config_provided_mode_renders_numbered_questions():
    config = CallConfig.from_payload({
        "username": "Ada",
        "userId": "u-1",
        "role": "Frontend Engineer",
        "type": "technical",
        "level": "senior",
        "techstack": ["React", "TypeScript"],
        "questionMode": "provided",
        "questionCount": 9,
        "questions": ["What is a closure?", "  ", "Explain reconciliation."],
    })

    values = config.to_variable_values()

    assert values["questions"] == "1. What is a closure?\n2. Explain reconciliation."
    assert values["questionCount"] == "2"
    assert values["techstack"] == "React, TypeScript"
    assert values["questionMode"] == "provided"
    assert values["companyInfo"] == "No company information available"


def test_call_config_generated_mode_omits_question_list():
    config = CallConfig.from_payload({"role": "Backend", "questionMode": "generated", "questions": ["ignored"]})

    values = config.to_variable_values()

    assert config.question_mode is QuestionMode.GENERATED
    assert values["questions"] == ""
    assert values["questionCount"] == "5"
    assert config.interview_title() == "Mock interview - Backend"


def test_call_config_rejects_bad_input():
    with pytest.raises(ValueError):
        CallConfig.from_payload({"questionMode": "improvised"})
    with pytest.raises(ValueError):
        CallConfig.from_payload({"questionMode": "provided", "questions": []})


def test_practice_config_uses_application():
    config = CallConfig.from_payload({"applicationId": "app-9", "role": "QA"})
    assert config.is_practice is True
    assert config.interview_title() == "Practice interview - QA"
