from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from voice_interview.transcript.models import MESSAGE_ROLES

logger = logging.getLogger("voice_interview.session.events")


@dataclass(frozen=True)
class CallStarted:
    pass


@dataclass(frozen=True)
class CallEnded:
    pass


@dataclass(frozen=True)
class TranscriptReceived:
    role: str
    text: str
    is_final: bool


@dataclass(frozen=True)
class AssistantSpeechStarted:
    pass


@dataclass(frozen=True)
class AssistantSpeechEnded:
    pass


@dataclass(frozen=True)
class CallFailed:
    cause: str


CallEvent = Union[
    CallStarted,
    CallEnded,
    TranscriptReceived,
    AssistantSpeechStarted,
    AssistantSpeechEnded,
    CallFailed,
]

_SIMPLE_EVENTS = {
    "call-start": CallStarted,
    "call-end": CallEnded,
    "speech-start": AssistantSpeechStarted,
    "speech-end": AssistantSpeechEnded,
}


def _describe_error(raw) -> str:
    if isinstance(raw, dict):
        for key in ("message", "errorMsg", "error", "type"):
            value = raw.get(key)
            if value:
                return str(value)
        return str(raw)
    return str(raw or "unknown error")


def _parse_transcript(message: dict) -> TranscriptReceived | None:
    role = str(message.get("role") or "").strip().lower()
    if role not in MESSAGE_ROLES:
        logger.info("transcript with unknown role dropped | role=%s", role or "-")
        return None
    transcript_type = str(message.get("transcriptType") or "").strip().lower()
    return TranscriptReceived(
        role=role,
        text=str(message.get("transcript") or ""),
        is_final=transcript_type == "final",
    )


def parse_call_event(payload: dict) -> CallEvent | None:
    """
    Decode one event relayed from the browser voice SDK.

    Accepts the SDK's own shapes (`call-start`, `call-end`, `speech-start`,
    `speech-end`, `error`, and `message` envelopes wrapping a `transcript`)
    as well as a flattened `{"type": "transcript", ...}`. Anything else is
    returned as None.
    """
    if not isinstance(payload, dict):
        return None
    event_type = str(payload.get("type") or "").strip().lower()

    simple = _SIMPLE_EVENTS.get(event_type)
    if simple is not None:
        return simple()

    if event_type == "error":
        return CallFailed(cause=_describe_error(payload.get("error")))

    if event_type == "transcript":
        return _parse_transcript(payload)

    if event_type == "message":
        message = payload.get("message")
        if isinstance(message, dict) and str(message.get("type") or "").strip().lower() == "transcript":
            return _parse_transcript(message)
        return None

    return None
