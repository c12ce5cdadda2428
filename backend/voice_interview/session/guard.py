import logging
import time

logger = logging.getLogger("voice_interview.session.guard")


class FinalizationGuard:
    """
    One-shot latch for a single call session.

    try_acquire() is synchronous on purpose: it must flip before the first
    await of finalization so a second call-end delivered while the first
    finalization is suspended sees it already set.
    """

    def __init__(self):
        self._acquired = False
        self.acquired_at: float | None = None

    @property
    def is_set(self) -> bool:
        return self._acquired

    def try_acquire(self, reason: str = "call_ended") -> bool:
        if self._acquired:
            logger.info("finalize skipped (already finalizing) | reason=%s", reason)
            return False
        self._acquired = True
        self.acquired_at = time.monotonic()
        logger.info("finalize acquired | reason=%s", reason)
        return True

    def reset(self) -> None:
        self._acquired = False
        self.acquired_at = None
