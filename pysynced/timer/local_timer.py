# pysynced/timer/local_timer.py
import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo, UTC
from typing import Any, Callable, List, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


@dataclass
class JobHandle:
    """Cancels this process's local firings of a job. Shared state is untouched."""

    name: str
    timer: "LocalTimer"

    def cancel(self) -> bool:
        return self.timer.cancel(self)

    @property
    def next_fire_time(self) -> Optional[datetime]:
        return self.timer.next_fire_time(self.name)


class LocalTimer:
    """
    In-process timer on top of APScheduler's ``BackgroundScheduler``.

    Every application instance runs its own timer and fires independently.
    Registering a name that already exists replaces the previous job.
    """

    def __init__(
        self,
        scheduler: Optional[BackgroundScheduler] = None,
        max_workers: int = 10,
        timezone: tzinfo = UTC,
        misfire_grace_time: int = 30,
    ):
        if scheduler is None:
            scheduler = BackgroundScheduler(
                executors={"default": ThreadPoolExecutor(max_workers)},
                job_defaults={
                    "coalesce": True,
                    "max_instances": 1,
                    "misfire_grace_time": misfire_grace_time,
                },
                timezone=timezone,
            )
        self._scheduler = scheduler
        self.max_workers = max_workers
        self._was_shut_down = False

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if self._scheduler.running:
            return
        if self._was_shut_down:
            # A shut down ThreadPoolExecutor rejects new futures
            self._scheduler.remove_executor("default", shutdown=False)
            self._scheduler.add_executor(ThreadPoolExecutor(self.max_workers), "default")
        self._scheduler.start()
        logger.info("Local timer started")

    def shutdown(self, wait: bool = True) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            self._was_shut_down = True
            logger.info("Local timer stopped")

    def schedule(self, name: str, spec: Any, callback: Callable[[], Any]) -> JobHandle:
        """Registers ``callback`` to fire per ``spec`` (a resolved spec variant)."""
        self._scheduler.add_job(
            callback,
            trigger=spec.build_trigger(),
            id=name,
            name=name,
            replace_existing=True,
        )
        logger.info(f"Scheduled job {name} ({type(spec).__name__})")
        return JobHandle(name=name, timer=self)

    def cancel(self, handle) -> bool:
        name = handle.name if isinstance(handle, JobHandle) else handle
        try:
            self._scheduler.remove_job(name)
        except JobLookupError:
            return False
        logger.info(f"Cancelled job {name}")
        return True

    def get_jobs(self) -> List[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def next_fire_time(self, name: str) -> Optional[datetime]:
        job = self._scheduler.get_job(name)
        if job is None:
            return None
        return getattr(job, "next_run_time", None)
