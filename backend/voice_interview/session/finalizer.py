from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Coroutine

from voice_interview.core.config import RESULTS_PATH_TEMPLATE
from voice_interview.core.logger import log_event, log_session_event
from voice_interview.schemas import InterviewStatus, SessionRecordUpdate, TurnRecordCreate
from voice_interview.session.collaborators import InterviewStore, NavigateFn
from voice_interview.session.models import CallSession
from voice_interview.session.records import RecordTrigger, SessionRecordResolver, utc_now
from voice_interview.system_metrics import increment_metric
from voice_interview.transcript.accumulator import serialize_transcript
from voice_interview.transcript.assessment import extract_assessment
from voice_interview.transcript.models import InterviewTurn
from voice_interview.transcript.turns import TurnExtractor

logger = logging.getLogger("voice_interview.session.finalizer")


@dataclass
class FinalizationResult:
    record_id: str
    full_transcript: str
    turns: list[InterviewTurn] = field(default_factory=list)
    assessment_found: bool = False


def results_path(record_id: str) -> str:
    return RESULTS_PATH_TEMPLATE.format(session_id=record_id)


class FinalizationPipeline:
    """
    Converts one ended call into persisted records, exactly once.

    run() returns as soon as the record update (the authoritative write)
    succeeds and the client has been told to navigate. Turn writes and the
    analysis trigger are detached tasks; their failures only reach logs and
    metrics.
    """

    def __init__(
        self,
        store: InterviewStore,
        resolver: SessionRecordResolver,
        navigate_fn: NavigateFn,
        now_fn: Callable[[], datetime] = utc_now,
        extractor: TurnExtractor | None = None,
    ):
        self.store = store
        self.resolver = resolver
        self.navigate_fn = navigate_fn
        self.now_fn = now_fn
        self.extractor = extractor or TurnExtractor()
        self.background_tasks: set[asyncio.Task] = set()

    async def run(self, session: CallSession, reason: str = "call_ended") -> FinalizationResult | None:
        # No await may precede this line.
        if not session.guard.try_acquire(reason):
            increment_metric("finalizations_skipped_duplicate")
            log_session_event("finalizer", "finalize_skipped", session, reason=reason)
            return None
        # Everything this call persists is read here, before the first await;
        # a restart during record resolution resets these on the session.
        generation = session.generation
        elapsed_seconds = int(session.elapsed_seconds)
        messages = session.transcript.snapshot()
        increment_metric("finalizations_started")
        log_session_event("finalizer", "finalize_started", session, reason=reason, elapsed_seconds=elapsed_seconds)

        record = session.record
        if record is None:
            record = await self.resolver.resolve_or_create_session_record(session, RecordTrigger.FALLBACK)
            if record is None:
                increment_metric("finalizations_aborted_record")
                logger.warning("finalize aborted: no session record | session=%s", session.session_id)
                return None
            if session.generation == generation:
                session.record = record
            else:
                logger.info(
                    "fallback record kept out of newer call | session=%s record=%s generation=%s",
                    session.session_id,
                    record.id,
                    generation,
                )

        full_transcript = serialize_transcript(messages)
        turns = self.extractor.extract(messages)
        assessment = extract_assessment(full_transcript)

        update = SessionRecordUpdate(
            status=InterviewStatus.PROCESSING,
            ended_at=self.now_fn(),
            duration_seconds=elapsed_seconds,
            full_transcript=full_transcript,
        )
        if assessment is not None:
            update.overall_score = assessment.total_score
            update.ai_analysis_data = assessment.model_dump(by_alias=True)

        try:
            await self.store.update_session_record(record.id, update)
        except Exception as exc:
            increment_metric("finalizations_aborted_update")
            logger.warning("finalize aborted: record update failed | session=%s record=%s err=%s", session.session_id, record.id, exc)
            return None

        self._detach(self._persist_turns(session.session_id, record.id, turns), name=f"turns-{record.id}")
        self._detach(self._trigger_analysis(session.session_id, record.id), name=f"analysis-{record.id}")

        try:
            await self.navigate_fn(record.id)
        except Exception as exc:
            increment_metric("navigations_failed")
            logger.warning("navigate to results failed | session=%s record=%s err=%s", session.session_id, record.id, exc)

        increment_metric("finalizations_completed")
        log_event(
            "finalizer",
            "finalize_completed",
            session.session_id,
            record_id=record.id,
            generation=generation,
            turn_count=len(turns),
            message_count=len(messages),
            assessment_found=assessment is not None,
        )
        return FinalizationResult(
            record_id=record.id,
            full_transcript=full_transcript,
            turns=turns,
            assessment_found=assessment is not None,
        )

    def _detach(self, coro: Coroutine, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self.background_tasks.add(task)
        task.add_done_callback(self.background_tasks.discard)
        return task

    async def _persist_turns(self, session_id: str, record_id: str, turns: list[InterviewTurn]) -> None:
        if not turns:
            return
        writes = [
            self.store.create_turn_record(
                TurnRecordCreate(
                    interview_id=record_id,
                    order_index=turn.order_index,
                    question_text=turn.question_text,
                    question_category=turn.question_category,
                    answer_text=turn.answer_text,
                )
            )
            for turn in turns
        ]
        outcomes = await asyncio.gather(*writes, return_exceptions=True)

        failed = 0
        for turn, outcome in zip(turns, outcomes):
            if isinstance(outcome, BaseException):
                failed += 1
                logger.warning(
                    "turn write failed | session=%s record=%s order=%s err=%s",
                    session_id,
                    record_id,
                    turn.order_index,
                    outcome,
                )
        increment_metric("turn_writes_ok", len(turns) - failed)
        increment_metric("turn_writes_failed", failed)
        log_event("finalizer", "turns_persisted", session_id, record_id=record_id, ok=len(turns) - failed, failed=failed)

    async def _trigger_analysis(self, session_id: str, record_id: str) -> None:
        try:
            await self.store.trigger_analysis(record_id)
        except Exception as exc:
            increment_metric("analysis_triggers_failed")
            logger.warning("analysis trigger failed | session=%s record=%s err=%s", session_id, record_id, exc)
            return
        log_event("finalizer", "analysis_triggered", session_id, record_id=record_id)

    async def drain(self) -> None:
        """Wait for detached work; used on shutdown and in tests."""
        while self.background_tasks:
            await asyncio.gather(*list(self.background_tasks), return_exceptions=True)
