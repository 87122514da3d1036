# pysynced/execution/guard.py
import logging
from datetime import datetime, UTC
from typing import Any, Callable, Optional

from pysynced.common.job import lock_name_for, to_millis
from pysynced.execution.performer import perform_action
from pysynced.locking.base import DistributedLock
from pysynced.storage.base import WatermarkStore

logger = logging.getLogger(__name__)


def should_run(
    watermark: Optional[int], next_execution: int, recurring: bool, now_ms: int
) -> bool:
    if watermark is None:
        return True
    if recurring:
        return watermark < now_ms
    return watermark != next_execution


class DedupGuard:
    """
    Lets at most one instance run each due occurrence of a job.

    Every instance fires the same timer. On each firing the guard takes the
    job's lock, compares the stored watermark with the occurrence, and claims
    it by writing the new watermark before the lock is released. Only the
    claiming instance runs the action.
    """

    def __init__(
        self,
        store: WatermarkStore,
        lock: DistributedLock,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.lock = lock
        self.clock = clock or (lambda: datetime.now(UTC))

    def claim(self, job_name: str, next_execution: int, recurring: bool) -> bool:
        with self.lock.hold(lock_name_for(job_name)):
            watermark = self.store.get(job_name)
            now_ms = to_millis(self.clock())
            if not should_run(watermark, next_execution, recurring, now_ms):
                logger.debug(
                    f"Job {job_name}: occurrence {next_execution} already claimed "
                    f"(watermark={watermark})"
                )
                return False
            # Must be written before the lock is released
            self.store.set(job_name, next_execution)
        logger.debug(f"Job {job_name}: claimed occurrence {next_execution}")
        return True

    def guard(
        self,
        job_name: str,
        next_execution: int,
        action: Callable[[], Any],
        recurring: bool,
    ) -> bool:
        """Returns True if this instance claimed the occurrence and ran the action."""
        if not self.claim(job_name, next_execution, recurring):
            return False
        perform_action(job_name, action)
        return True
