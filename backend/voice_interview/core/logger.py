import json
import logging
import time
from typing import Any

logger = logging.getLogger("voice_interview.events")

# Fields that may carry what the candidate or the assistant said.
_TRANSCRIPT_KEYS = {
	"text",
	"content",
	"transcript",
	"full_transcript",
	"question_text",
	"answer_text",
}


def _redact(value: Any) -> dict:
	return {"redacted": True, "length": len(str(value or ""))}


def _sanitize_value(key: str, value: Any) -> Any:
	if str(key or "").lower() in _TRANSCRIPT_KEYS:
		return _redact(value)
	if isinstance(value, (str, int, float, bool)) or value is None:
		return value
	if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
		return value.value
	if isinstance(value, dict):
		return {str(k): _sanitize_value(str(k), v) for k, v in value.items()}
	if isinstance(value, (list, tuple, set)):
		return [_sanitize_value(key, item) for item in value]
	return str(value)


def session_context(session: Any) -> dict[str, Any]:
	"""Call-session fields every lifecycle line carries: state, generation and the record cell."""
	record = getattr(session, "record", None)
	state = getattr(session, "state", None)
	return {
		"state": getattr(state, "value", state),
		"generation": getattr(session, "generation", None),
		"record_id": getattr(record, "id", None),
	}


def log_event(component: str, event: str, session_id: str, **kwargs) -> None:
	"""Emit one JSON line per call-lifecycle event; transcript text is never logged."""
	payload = {
		"ts": round(time.time(), 3),
		"component": str(component or "voice_interview"),
		"event": str(event or "unknown"),
		"session_id": str(session_id or ""),
	}
	for key, value in kwargs.items():
		payload[str(key)] = _sanitize_value(str(key), value)
	logger.info(json.dumps(payload, ensure_ascii=False, default=str))


def log_session_event(component: str, event: str, session: Any, **kwargs) -> None:
	fields = session_context(session)
	fields.update(kwargs)
	log_event(component, event, getattr(session, "session_id", ""), **fields)
