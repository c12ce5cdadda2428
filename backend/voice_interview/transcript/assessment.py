from __future__ import annotations

import json
import logging
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from voice_interview.core.config import ASSESSMENT_MARKER

logger = logging.getLogger("voice_interview.transcript.assessment")

_CODE_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)

CategoryName = Literal[
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
]


class CategoryScore(BaseModel):
    name: CategoryName
    score: float
    comment: str


class AssessmentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_score: float = Field(alias="totalScore")
    category_scores: list[CategoryScore] = Field(alias="categoryScores")
    strengths: list[str]
    areas_for_improvement: list[str] = Field(alias="areasForImprovement")
    final_assessment: str = Field(alias="finalAssessment")


def extract_assessment(transcript_text: str, marker: str = ASSESSMENT_MARKER) -> AssessmentPayload | None:
    """
    Best-effort: parse the JSON object following the LAST marker.
    Returns None when the marker is absent or the payload is malformed.
    """
    text = str(transcript_text or "")
    if not marker:
        return None
    position = text.rfind(marker)
    if position < 0:
        return None

    tail = _CODE_FENCE.sub("", text[position + len(marker):].lstrip())
    start = tail.find("{")
    if start < 0:
        logger.info("assessment marker without payload")
        return None

    try:
        raw, _ = json.JSONDecoder().raw_decode(tail[start:])
    except json.JSONDecodeError as exc:
        logger.info("assessment payload not decodable | err=%s", exc)
        return None
    if not isinstance(raw, dict):
        return None

    try:
        return AssessmentPayload.model_validate(raw)
    except ValidationError as exc:
        logger.info("assessment payload rejected | errors=%s", exc.error_count())
        return None
