import asyncio
import logging
import time

from voice_interview.core.config import CALL_TICK_INTERVAL_SEC
from voice_interview.core.logger import log_session_event
from voice_interview.session.collaborators import NotifyFn, VoiceService
from voice_interview.session.events import (
    AssistantSpeechEnded,
    AssistantSpeechStarted,
    CallEnded,
    CallEvent,
    CallFailed,
    CallStarted,
    TranscriptReceived,
)
from voice_interview.session.finalizer import FinalizationPipeline, FinalizationResult
from voice_interview.session.models import CallConfig, CallSession, SessionState
from voice_interview.session.records import RecordTrigger, SessionRecordResolver
from voice_interview.system_metrics import (
    decrement_metric,
    increment_metric,
    observe_call_duration,
)
from voice_interview.transcript.models import TranscriptMessage

logger = logging.getLogger("voice_interview.session.controller")


class CallSessionController:
    """
    Lifecycle owner for one voice-interview call.

    Every event from the voice service goes through dispatch(). State only
    moves on events; the only timer is the elapsed-seconds tick while active.
    """

    def __init__(
        self,
        voice: VoiceService,
        resolver: SessionRecordResolver,
        pipeline: FinalizationPipeline,
        notify_fn: NotifyFn | None = None,
        session: CallSession | None = None,
        tick_interval_sec: float = CALL_TICK_INTERVAL_SEC,
    ):
        self.voice = voice
        self.resolver = resolver
        self.pipeline = pipeline
        self.notify_fn = notify_fn
        self.session = session or CallSession()
        self.tick_interval_sec = tick_interval_sec
        self.tasks: set[asyncio.Task] = set()
        self._tick_task: asyncio.Task | None = None
        self._record_task: asyncio.Task | None = None
        self._started_monotonic: float | None = None
        self.last_result: FinalizationResult | None = None

    @property
    def state(self) -> SessionState:
        return self.session.state

    # -------------------------
    # COMMANDS (to the voice service)
    # -------------------------

    async def start_call(self, config: CallConfig) -> bool:
        """Returns False when a call is already active; its config stays as is."""
        if self.session.state is SessionState.ACTIVE:
            logger.info("start_call while active ignored | session=%s", self.session.session_id)
            return False
        self.session.config = config
        payload = {"variableValues": config.to_variable_values()}
        log_session_event(
            "controller",
            "start_call",
            self.session,
            question_mode=config.question_mode.value,
            question_count=config.effective_question_count(),
            practice=config.is_practice,
        )
        await self.voice.start(payload)
        return True

    async def stop_call(self) -> None:
        log_session_event("controller", "stop_call", self.session)
        await self.voice.stop()

    async def set_muted(self, muted: bool) -> None:
        self.session.muted = bool(muted)
        await self.voice.set_muted(self.session.muted)

    # -------------------------
    # EVENTS (from the voice service)
    # -------------------------

    async def dispatch(self, event: CallEvent) -> None:
        if isinstance(event, CallStarted):
            await self._on_started()
        elif isinstance(event, CallEnded):
            await self._on_ended()
        elif isinstance(event, TranscriptReceived):
            self._on_transcript(event)
        elif isinstance(event, AssistantSpeechStarted):
            await self._on_speech(True)
        elif isinstance(event, AssistantSpeechEnded):
            await self._on_speech(False)
        elif isinstance(event, CallFailed):
            self._on_error(event)
        else:
            logger.info("unknown call event ignored | session=%s event=%r", self.session.session_id, event)

    async def _on_started(self) -> None:
        session = self.session
        if session.state is SessionState.ACTIVE:
            logger.info("call-start while active ignored | session=%s", session.session_id)
            return

        session.transcript.reset()
        session.guard.reset()
        session.elapsed_seconds = 0
        session.record = None
        session.assistant_speaking = False
        session.generation += 1
        session.state = SessionState.ACTIVE
        self._started_monotonic = time.monotonic()

        self._tick_task = self._create_task(self._tick(session.generation))
        self._record_task = self._create_task(self._create_optimistic_record(session.generation))

        increment_metric("calls_started_total")
        increment_metric("calls_active")
        log_session_event("controller", "call_started", session)
        await self._notify({"type": "call_status", "status": SessionState.ACTIVE.value})

    async def _on_ended(self) -> None:
        session = self.session
        if session.state is SessionState.IDLE:
            logger.info("call-end before call-start ignored | session=%s", session.session_id)
            return

        if session.state is SessionState.ACTIVE:
            session.state = SessionState.ENDED
            session.assistant_speaking = False
            self._stop_tick()
            decrement_metric("calls_active")
            increment_metric("calls_ended_total")
            if self._started_monotonic is not None:
                observe_call_duration(time.monotonic() - self._started_monotonic)
            log_session_event("controller", "call_ended", session, elapsed_seconds=session.elapsed_seconds)
            await self._notify({"type": "call_status", "status": SessionState.ENDED.value})

        result = await self.pipeline.run(session)
        if result is not None:
            self.last_result = result

    def _on_transcript(self, event: TranscriptReceived) -> None:
        if not event.is_final:
            return
        if self.session.state is not SessionState.ACTIVE:
            logger.info("transcript outside active call dropped | session=%s state=%s", self.session.session_id, self.state.value)
            return
        self.session.transcript.append(TranscriptMessage(role=event.role, content=event.text))

    async def _on_speech(self, speaking: bool) -> None:
        if self.session.state is not SessionState.ACTIVE:
            return
        self.session.assistant_speaking = speaking
        await self._notify({"type": "assistant_speaking", "value": speaking})

    def _on_error(self, event: CallFailed) -> None:
        increment_metric("voice_errors_total")
        logger.warning("voice service error | session=%s state=%s cause=%s", self.session.session_id, self.state.value, event.cause)

    # -------------------------
    # BACKGROUND
    # -------------------------

    async def _tick(self, generation: int) -> None:
        session = self.session
        while session.state is SessionState.ACTIVE and session.generation == generation:
            await asyncio.sleep(self.tick_interval_sec)
            if session.state is SessionState.ACTIVE and session.generation == generation:
                session.elapsed_seconds += 1

    def _stop_tick(self) -> None:
        if self._tick_task is not None and not self._tick_task.done():
            self._tick_task.cancel()
        self._tick_task = None

    async def _create_optimistic_record(self, generation: int) -> None:
        session = self.session
        record = await self.resolver.resolve_or_create_session_record(session, RecordTrigger.OPTIMISTIC)
        if record is None:
            increment_metric("records_optimistic_failed")
            return
        if session.generation != generation or session.record is not None:
            logger.info("optimistic record arrived late; discarded | session=%s record=%s", session.session_id, record.id)
            return
        session.record = record

    def _create_task(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task

    async def _notify(self, payload: dict) -> None:
        if self.notify_fn is None:
            return
        try:
            await self.notify_fn(payload)
        except Exception as exc:
            logger.warning("client notify failed | session=%s err=%s", self.session.session_id, exc)

    async def close(self) -> None:
        """Stop timers. Detached finalization work is left to finish."""
        if self.session.state is SessionState.ACTIVE:
            decrement_metric("calls_active")
            log_session_event("controller", "closed_while_active", self.session, elapsed_seconds=self.session.elapsed_seconds)
        self._stop_tick()
        pending = [task for task in self.tasks if not task.done()]
        await asyncio.gather(*pending, return_exceptions=True)
