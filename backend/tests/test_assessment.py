import json

from voice_interview.transcript.assessment import extract_assessment


def _payload(total: float = 72) -> dict:
    return {
        "totalScore": total,
        "categoryScores": [
            {"name": "Communication Skills", "score": 80, "comment": "Clear"},
            {"name": "Technical Knowledge", "score": 70, "comment": "Solid"},
        ],
        "strengths": ["Structured answers"],
        "areasForImprovement": ["More depth on testing"],
        "finalAssessment": "Promising candidate.",
    }


def test_returns_none_without_marker():
    assert extract_assessment("assistant: Q1: hi\nuser: hello") is None


def test_parses_payload_after_last_marker():
    text = (
        "assistant: FEEDBACK_JSON: " + json.dumps(_payload(10)) + "\n"
        "user: thanks\n"
        "assistant: FEEDBACK_JSON: ```json\n" + json.dumps(_payload(88)) + "\n```"
    )

    payload = extract_assessment(text)

    assert payload is not None
    assert payload.total_score == 88
    assert payload.category_scores[0].name == "Communication Skills"
    assert payload.areas_for_improvement == ["More depth on testing"]


def test_malformed_payload_returns_none():
    assert extract_assessment("assistant: FEEDBACK_JSON: {not json") is None
    assert extract_assessment("assistant: FEEDBACK_JSON: nothing here") is None


def test_schema_violation_returns_none():
    bad = _payload()
    bad["categoryScores"][0]["name"] = "Charisma"
    assert extract_assessment("FEEDBACK_JSON: " + json.dumps(bad)) is None


def test_custom_marker():
    text = "<<SCORE>> " + json.dumps(_payload(55))
    assert extract_assessment(text, marker="<<SCORE>>").total_score == 55
