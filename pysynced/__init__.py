from .common.recurrence import RecurrenceRule
from .config import configure as _configure, get_lock, get_store
from .locking.base import DistributedLock
from .scheduler import SyncedScheduler
from .storage.base import WatermarkStore
from .timer.local_timer import JobHandle

_scheduler: SyncedScheduler | None = None


def configure(store: WatermarkStore, lock: DistributedLock | None = None) -> None:
    _configure(store, lock)
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
    _scheduler = None


def get_scheduler() -> SyncedScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = SyncedScheduler(get_store(), get_lock())
    return _scheduler


__all__ = [
    "JobHandle",
    "RecurrenceRule",
    "SyncedScheduler",
    "configure",
    "get_lock",
    "get_scheduler",
    "get_store",
]
