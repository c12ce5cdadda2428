from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from voice_interview.core.config import SESSION_RECORD_TTL_DAYS
from voice_interview.core.logger import log_event
from voice_interview.schemas import SessionRecord, SessionRecordCreate, SessionRecordKind
from voice_interview.session.collaborators import IdentityResolver, InterviewStore
from voice_interview.session.models import CallSession
from voice_interview.system_metrics import increment_metric

logger = logging.getLogger("voice_interview.session.records")


class RecordTrigger(str, Enum):
    OPTIMISTIC = "optimistic"
    FALLBACK = "fallback"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_access_code() -> str:
    return secrets.token_hex(4).upper()


class SessionRecordResolver:
    """
    Single place that creates the backing interview record, whether at call
    start (optimistic) or during finalization when nothing exists yet
    (fallback). Returns None instead of raising.
    """

    def __init__(
        self,
        store: InterviewStore,
        identity: IdentityResolver,
        now_fn: Callable[[], datetime] = utc_now,
        ttl_days: int = SESSION_RECORD_TTL_DAYS,
    ):
        self.store = store
        self.identity = identity
        self.now_fn = now_fn
        self.ttl_days = ttl_days

    async def resolve_or_create_session_record(
        self,
        session: CallSession,
        trigger: RecordTrigger,
    ) -> SessionRecord | None:
        if trigger is RecordTrigger.FALLBACK and session.record is not None:
            return session.record

        now = self.now_fn()
        started_at = now
        if trigger is RecordTrigger.FALLBACK:
            started_at = now - timedelta(seconds=max(0, int(session.elapsed_seconds)))
        expires_at = started_at + timedelta(days=self.ttl_days)

        config = session.config
        params = SessionRecordCreate(
            title=config.interview_title(),
            access_code=new_access_code(),
            expires_at=expires_at,
            started_at=started_at,
        )

        if config.is_practice:
            kind = SessionRecordKind.PRACTICE
            params.application_id = config.application_id
        else:
            kind = SessionRecordKind.STANDALONE
            try:
                identity = await self.identity.resolve_current_identity()
            except Exception as exc:
                logger.warning("identity lookup raised | session=%s trigger=%s err=%s", session.session_id, trigger.value, exc)
                identity = None
            if identity is None:
                logger.warning("no candidate identity; record not created | session=%s trigger=%s", session.session_id, trigger.value)
                return None
            params.candidate_id = identity.candidate_id

        try:
            record = await self.store.create_session_record(kind, params)
        except Exception as exc:
            logger.warning(
                "session record create failed | session=%s trigger=%s kind=%s err=%s",
                session.session_id,
                trigger.value,
                kind.value,
                exc,
            )
            return None

        increment_metric(f"records_created_{trigger.value}")
        log_event(
            "records",
            "session_record_created",
            session.session_id,
            record_id=record.id,
            trigger=trigger.value,
            kind=kind.value,
            started_at=started_at.isoformat(),
        )
        return record
