import asyncio
import base64
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from voice_interview.clients.interviews_api import InterviewsApiError  # noqa: E402
from voice_interview.schemas import CandidateIdentity, SessionRecord  # noqa: E402

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    # config is read once at import; auth looks these up on the module per call
    from voice_interview.core import config

    monkeypatch.setattr(config, "ENVIRONMENT", "development")
    monkeypatch.setattr(config, "JWT_SECRET", "")
    monkeypatch.setattr(config, "ALLOW_UNVERIFIED_JWT_DEV", True)


@pytest.fixture
def dev_jwt_token() -> str:
    def _enc(obj: dict) -> str:
        raw = json.dumps(obj, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")

    header = _enc({"alg": "none", "typ": "JWT"})
    payload = _enc({"sub": "pytest-user", "iat": 0})
    return f"{header}.{payload}."


class FakeStore:
    def __init__(self):
        self.created = []
        self.updates = []
        self.turns = []
        self.analysis = []
        self.fail_create = False
        self.fail_update = False
        self.fail_turns = False
        self.fail_analysis = False
        self.create_gate: asyncio.Event | None = None
        self._next_id = 0

    async def create_session_record(self, kind, params):
        self.created.append((kind, params))
        self._next_id += 1
        record_id = f"rec-{self._next_id}"
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.fail_create:
            raise InterviewsApiError("create failed", status_code=500)
        return SessionRecord(
            id=record_id,
            application_id=params.application_id,
            candidate_id=params.candidate_id,
            status=params.status,
            started_at=params.started_at,
            expires_at=params.expires_at,
        )

    async def update_session_record(self, record_id, update):
        await asyncio.sleep(0)
        self.updates.append((record_id, update))
        if self.fail_update:
            raise InterviewsApiError("update failed", status_code=500)
        return SessionRecord(id=record_id, status=update.status)

    async def create_turn_record(self, turn):
        await asyncio.sleep(0)
        self.turns.append(turn)
        if self.fail_turns:
            raise InterviewsApiError("turn failed", status_code=500)

    async def trigger_analysis(self, record_id):
        await asyncio.sleep(0)
        self.analysis.append(record_id)
        if self.fail_analysis:
            raise InterviewsApiError("analysis failed", status_code=503)


class FakeIdentity:
    def __init__(self, candidate_id: str | None = "cand-1"):
        self.candidate_id = candidate_id
        self.calls = 0

    async def resolve_current_identity(self):
        self.calls += 1
        if not self.candidate_id:
            return None
        return CandidateIdentity(candidate_id=self.candidate_id)


class FakeVoice:
    def __init__(self):
        self.commands = []

    async def start(self, payload: dict) -> None:
        self.commands.append(("start", payload))

    async def stop(self) -> None:
        self.commands.append(("stop", None))

    async def set_muted(self, muted: bool) -> None:
        self.commands.append(("set_muted", muted))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def call_harness(store: FakeStore, identity: FakeIdentity):
    from voice_interview.session.controller import CallSessionController
    from voice_interview.session.finalizer import FinalizationPipeline
    from voice_interview.session.records import SessionRecordResolver

    navigations: list[str] = []
    notifications: list[dict] = []

    async def _navigate(record_id: str) -> None:
        navigations.append(record_id)

    async def _notify(payload: dict) -> None:
        notifications.append(payload)

    voice = FakeVoice()
    resolver = SessionRecordResolver(store, identity, now_fn=lambda: NOW)
    pipeline = FinalizationPipeline(store=store, resolver=resolver, navigate_fn=_navigate, now_fn=lambda: NOW)
    controller = CallSessionController(
        voice=voice,
        resolver=resolver,
        pipeline=pipeline,
        notify_fn=_notify,
        tick_interval_sec=3600,
    )
    return SimpleNamespace(
        store=store,
        identity=identity,
        voice=voice,
        resolver=resolver,
        pipeline=pipeline,
        controller=controller,
        session=controller.session,
        navigations=navigations,
        notifications=notifications,
    )
