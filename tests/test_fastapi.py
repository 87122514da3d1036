import time
from datetime import datetime, timedelta, UTC

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from pysynced.integrations.fastapi import add_synced_scheduler_to_fastapi
from pysynced.storage.memory_storage import MemoryWatermarkStore
from tests.test_tasks import RecordingAction


def test_scheduler_follows_app_lifecycle():
    app = FastAPI()
    plugin = add_synced_scheduler_to_fastapi(app, MemoryWatermarkStore())

    @app.get("/jobs")
    def list_jobs(request: Request):
        return [job.name for job in request.app.state.synced_scheduler.get_jobs()]

    assert plugin.schedule_job("nightly", "0 3 * * *", RecordingAction()) is None
    assert not plugin.scheduler.timer.running

    with TestClient(app) as client:
        assert plugin.scheduler.timer.running
        assert client.get("/jobs").json() == ["nightly"]

        handle = plugin.schedule_job("hourly", "0 * * * *", RecordingAction())
        assert handle is not None
        assert sorted(client.get("/jobs").json()) == ["hourly", "nightly"]

    assert not plugin.scheduler.timer.running


def test_scheduler_fires_after_second_lifespan():
    app = FastAPI()
    store = MemoryWatermarkStore()
    plugin = add_synced_scheduler_to_fastapi(app, store)

    with TestClient(app):
        assert plugin.scheduler.timer.running
    assert not plugin.scheduler.timer.running

    action = RecordingAction()
    with TestClient(app):
        assert plugin.scheduler.timer.running
        plugin.schedule_job("after-restart", datetime.now(UTC) + timedelta(milliseconds=300), action)
        deadline = time.monotonic() + 5
        while action.calls == 0 and time.monotonic() < deadline:
            time.sleep(0.05)
    assert action.calls == 1
    assert store.get("after-restart") is not None
