from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from voice_interview.schemas import (
    CandidateIdentity,
    SessionRecord,
    SessionRecordCreate,
    SessionRecordKind,
    SessionRecordUpdate,
    TurnRecordCreate,
)


NavigateFn = Callable[[str], Awaitable[None]]
NotifyFn = Callable[[dict], Awaitable[None]]


class InterviewStore(Protocol):
    async def create_session_record(self, kind: SessionRecordKind, params: SessionRecordCreate) -> SessionRecord:
        ...

    async def update_session_record(self, record_id: str, update: SessionRecordUpdate) -> SessionRecord:
        ...

    async def create_turn_record(self, turn: TurnRecordCreate) -> None:
        ...

    async def trigger_analysis(self, record_id: str) -> None:
        ...


class IdentityResolver(Protocol):
    async def resolve_current_identity(self) -> CandidateIdentity | None:
        ...


class VoiceService(Protocol):
    async def start(self, payload: dict) -> None:
        ...

    async def stop(self) -> None:
        ...

    async def set_muted(self, muted: bool) -> None:
        ...
