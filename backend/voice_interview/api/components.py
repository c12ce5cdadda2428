from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from voice_interview.session.finalizer import results_path


SendFn = Callable[[dict], Awaitable[None]]


@dataclass
class WebSocketVoiceBridge:
    """Voice-service commands, forwarded to the browser SDK that owns the call."""
    send_fn: SendFn

    async def start(self, payload: dict) -> None:
        await self.send_fn({"type": "start_call", **payload})

    async def stop(self) -> None:
        await self.send_fn({"type": "stop_call"})

    async def set_muted(self, muted: bool) -> None:
        await self.send_fn({"type": "set_muted", "muted": bool(muted)})


@dataclass
class ResultsNavigator:
    send_fn: SendFn

    async def navigate(self, record_id: str) -> None:
        await self.send_fn({
            "type": "navigate",
            "session_id": record_id,
            "path": results_path(record_id),
        })
