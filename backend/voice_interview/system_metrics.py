import threading
import time
from typing import Any


_lock = threading.Lock()
_metrics: dict[str, float] = {
    "calls_active": 0.0,
    "calls_started_total": 0.0,
    "calls_ended_total": 0.0,
    "voice_errors_total": 0.0,
    "finalizations_started": 0.0,
    "finalizations_skipped_duplicate": 0.0,
    "finalizations_completed": 0.0,
    "finalizations_aborted_record": 0.0,
    "finalizations_aborted_update": 0.0,
    "records_created_optimistic": 0.0,
    "records_created_fallback": 0.0,
    "records_optimistic_failed": 0.0,
    "turn_writes_ok": 0.0,
    "turn_writes_failed": 0.0,
    "analysis_triggers_failed": 0.0,
    "navigations_failed": 0.0,
    "relay_connections_active": 0.0,
    "call_duration_total_sec": 0.0,
    "call_duration_samples": 0.0,
}


def increment_metric(name: str, amount: float = 1.0) -> None:
    key = str(name or "").strip()
    if not key:
        return
    with _lock:
        _metrics[key] = float(_metrics.get(key, 0.0)) + float(amount)


def decrement_metric(name: str, amount: float = 1.0) -> None:
    key = str(name or "").strip()
    if not key:
        return
    with _lock:
        next_value = float(_metrics.get(key, 0.0)) - float(amount)
        _metrics[key] = max(0.0, next_value)


def set_metric(name: str, value: float) -> None:
    key = str(name or "").strip()
    if not key:
        return
    with _lock:
        _metrics[key] = max(0.0, float(value))


def get_metric(name: str) -> float:
    with _lock:
        return float(_metrics.get(str(name or "").strip(), 0.0))


def observe_call_duration(seconds: float) -> None:
    duration = max(0.0, float(seconds or 0.0))
    with _lock:
        _metrics["call_duration_total_sec"] = float(_metrics.get("call_duration_total_sec", 0.0)) + duration
        _metrics["call_duration_samples"] = float(_metrics.get("call_duration_samples", 0.0)) + 1.0


def get_metrics_snapshot(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    with _lock:
        data = dict(_metrics)

    duration_samples = max(1.0, float(data.get("call_duration_samples") or 0.0))

    payload: dict[str, Any] = {"generated_at": time.time()}
    for key, value in data.items():
        if key in {"call_duration_total_sec"}:
            payload[key] = float(value or 0.0)
        else:
            payload[key] = int(value or 0.0)
    payload["avg_call_duration_sec"] = round(float(data.get("call_duration_total_sec") or 0.0) / duration_samples, 2)

    if extra:
        payload.update(extra)
    return payload
