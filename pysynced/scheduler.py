# pysynced/scheduler.py
import logging
from datetime import datetime, tzinfo, UTC
from typing import Any, Callable, Dict, List, Optional, Union
from zoneinfo import ZoneInfo

import redis

from .common.job import Job
from .common.specs import resolve_spec
from .config import get_lock, get_store
from .execution.guard import DedupGuard
from .locking.base import DistributedLock
from .storage.base import WatermarkStore
from .storage.redis_storage import RedisWatermarkStore
from .timer.local_timer import JobHandle, LocalTimer

logger = logging.getLogger(__name__)


class SyncedScheduler:
    """
    Schedules jobs so that each due occurrence runs on exactly one of the
    application instances sharing a watermark store.

    ``store`` may be a ``WatermarkStore`` or a ``redis.Redis`` client. When
    omitted, the globally configured store is used. ``key_prefix`` is only
    accepted together with a Redis client; stores take their own prefix.
    """

    def __init__(
        self,
        store: Union[WatermarkStore, redis.Redis, None] = None,
        lock: Optional[DistributedLock] = None,
        timer: Optional[LocalTimer] = None,
        tz: Union[tzinfo, str] = UTC,
        key_prefix: str = "",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if isinstance(tz, str):
            tz = ZoneInfo(tz)
        if isinstance(store, redis.Redis):
            store = RedisWatermarkStore(redis_client=store, key_prefix=key_prefix)
        elif key_prefix:
            raise ValueError(
                "key_prefix only applies to a redis.Redis client; "
                "pass it to the WatermarkStore constructor instead"
            )
        if store is None:
            self.store = get_store()
            self.lock = lock or get_lock()
        else:
            self.store = store
            self.lock = lock or store.default_lock()
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(UTC))
        self.timer = timer or LocalTimer(timezone=tz)
        self.guard = DedupGuard(self.store, self.lock, clock=self.clock)
        self._jobs: Dict[str, Job] = {}

    def build_action(self, job_name: str, spec: Any, action: Callable[[], Any]) -> Callable[[], bool]:
        """Wraps ``action`` so each firing goes through the dedup guard."""
        resolved = resolve_spec(spec, self.tz)

        def synced_action() -> bool:
            firing = resolved.next_firing(self.clock())
            if firing is None:
                logger.debug(f"Job {job_name}: spec has no further occurrences")
                return False
            return self.guard.guard(job_name, firing.next_execution, action, firing.recurring)

        synced_action.__name__ = f"synced_{job_name}"
        return synced_action

    def schedule_job(self, job_name: str, spec: Any, action: Callable[[], Any]) -> JobHandle:
        resolved = resolve_spec(spec, self.tz)
        job = Job(name=job_name, spec=resolved, action=action)
        if job_name in self._jobs:
            logger.warning(f"Job {job_name} is already scheduled; replacing it")
        handle = self.timer.schedule(job_name, resolved, self.build_action(job_name, resolved, action))
        self._jobs[job_name] = job
        self.timer.start()
        return handle

    def cancel_job(self, job_name: str) -> bool:
        self._jobs.pop(job_name, None)
        return self.timer.cancel(job_name)

    def get_jobs(self) -> List[Job]:
        live = set(self.timer.get_jobs())
        return [job for name, job in self._jobs.items() if name in live]

    def get_job(self, job_name: str) -> Optional[Job]:
        if job_name not in self.timer.get_jobs():
            return None
        return self._jobs.get(job_name)

    def shutdown(self, wait: bool = True) -> None:
        self.timer.shutdown(wait=wait)
