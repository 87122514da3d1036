"""FastAPI integration helpers for pysynced."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

try:
    from fastapi import FastAPI
except ImportError as exc:  # pragma: no cover - optional dependency
    raise ImportError(
        "FastAPI integration requires 'fastapi'. Install with `pip install pysynced[fastapi]`."
    ) from exc

from pysynced.locking.base import DistributedLock
from pysynced.scheduler import SyncedScheduler
from pysynced.storage.base import WatermarkStore
from pysynced.timer.local_timer import JobHandle


class SyncedSchedulerFastAPIPlugin:
    """Runs one local timer per app process and stops it on shutdown."""

    def __init__(
        self,
        app: FastAPI,
        store: WatermarkStore,
        lock: Optional[DistributedLock] = None,
        **scheduler_options: Any,
    ):
        self.app = app
        self.scheduler = SyncedScheduler(store, lock, **scheduler_options)
        self._pending: list[tuple[str, Any, Callable[[], Any]]] = []
        self._started = False

        app.state.synced_scheduler = self.scheduler
        self._wrap_lifespan()

    def _wrap_lifespan(self) -> None:
        inner = self.app.router.lifespan_context

        @asynccontextmanager
        async def lifespan(app):
            await self.startup()
            try:
                async with inner(app) as state:
                    yield state
            finally:
                await self.shutdown()

        self.app.router.lifespan_context = lifespan

    def get_scheduler(self) -> SyncedScheduler:
        return self.scheduler

    def schedule_job(
        self, job_name: str, spec: Any, action: Callable[[], Any]
    ) -> Optional[JobHandle]:
        """Schedules now if the app is running, otherwise on startup."""
        if self._started:
            return self.scheduler.schedule_job(job_name, spec, action)
        self._pending.append((job_name, spec, action))
        return None

    async def startup(self) -> None:
        self._started = True
        for job_name, spec, action in self._pending:
            self.scheduler.schedule_job(job_name, spec, action)
        self._pending.clear()
        self.scheduler.timer.start()

    async def shutdown(self) -> None:
        self._started = False
        self.scheduler.shutdown(wait=True)


def add_synced_scheduler_to_fastapi(
    app: FastAPI, store: WatermarkStore, lock: Optional[DistributedLock] = None
) -> SyncedSchedulerFastAPIPlugin:
    return SyncedSchedulerFastAPIPlugin(app, store, lock)
