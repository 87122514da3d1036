import threading
import time
from datetime import datetime, UTC

import pytest

sqlalchemy = pytest.importorskip("sqlalchemy")
from sqlalchemy import create_engine, select
from sqlalchemy.pool import StaticPool

from pysynced.common.exceptions import LockAcquisitionError
from pysynced.common.sql_models import LockModel
from pysynced.locking.sql_lock import SqlLock
from pysynced.scheduler import SyncedScheduler
from pysynced.storage.sql_storage import SqlWatermarkStore
from tests.test_tasks import SharedCounter

NOW = datetime(2026, 10, 17, 10, 0, 0, 500000, tzinfo=UTC)


def _make_store(**kwargs) -> SqlWatermarkStore:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return SqlWatermarkStore(engine=engine, create_tables=True, **kwargs)


def _held_locks(store):
    with store._session_factory() as session:
        return session.execute(select(LockModel.name)).scalars().all()


def test_sql_store_get_set_delete():
    store = _make_store()
    assert store.get("digest") is None

    store.set("digest", 1792234800000)
    assert store.get("digest") == 1792234800000

    store.set("digest", 1792238400000)
    assert store.get("digest") == 1792238400000

    store.delete("digest")
    assert store.get("digest") is None
    store.delete("digest")


def test_sql_store_key_prefix_and_listing():
    store = _make_store(key_prefix="app:")
    store.set("b-job", 2)
    store.set("a-job", 1)
    assert store.list_watermarks() == {"a-job": 1, "b-job": 2}

    unprefixed = SqlWatermarkStore(engine=store.engine, create_tables=False)
    assert unprefixed.get("app:a-job") == 1
    assert unprefixed.get("a-job") is None


def test_sql_store_requires_engine_or_url():
    with pytest.raises(ValueError):
        SqlWatermarkStore()


def test_sql_lock_hold_releases_row():
    store = _make_store()
    lock = store.default_lock()
    with lock.hold("digestLock") as token:
        assert token.holder == lock.instance_id
        assert _held_locks(store) == ["digestLock"]
    assert _held_locks(store) == []


def test_sql_lock_releases_on_error():
    store = _make_store()
    lock = store.default_lock()
    with pytest.raises(RuntimeError):
        with lock.hold("digestLock"):
            raise RuntimeError("store call failed")
    assert _held_locks(store) == []


def test_sql_lock_acquire_timeout():
    store = _make_store()
    holder = store.default_lock()
    waiter = SqlLock(store._session_factory, acquire_timeout=0.2, poll_interval=0.05)
    with holder.hold("digestLock"):
        with pytest.raises(LockAcquisitionError):
            waiter.acquire("digestLock")


def test_sql_lock_ttl_expiry(caplog):
    store = _make_store()
    first = SqlLock(store._session_factory, ttl_seconds=0.1)
    second = SqlLock(store._session_factory, ttl_seconds=0.1, acquire_timeout=2, poll_interval=0.05)

    stale = first.acquire("digestLock")
    token = second.acquire("digestLock")
    assert token.holder == second.instance_id

    first.release(stale)
    assert "was no longer held" in caplog.text
    assert _held_locks(store) == ["digestLock"]
    second.release(token)
    assert _held_locks(store) == []


def test_digest_scenario_on_sql_store():
    store = _make_store()
    counter = SharedCounter()
    clock = lambda: NOW
    instance_a = SyncedScheduler(store, clock=clock)
    instance_b = SyncedScheduler(store, clock=clock)
    assert instance_a.lock.instance_id != instance_b.lock.instance_id

    fire_a = instance_a.build_action("digest", "0 * * * *", counter.action_for("A"))
    fire_b = instance_b.build_action("digest", "0 * * * *", counter.action_for("B"))
    assert fire_a() is True
    assert fire_b() is False
    assert counter.calls == ["A"]
    assert store.get("digest") == 1792234800000
    assert _held_locks(store) == []


def test_concurrent_instances_on_sql_file(tmp_path):
    store = SqlWatermarkStore(connection_url=f"sqlite:///{tmp_path / 'pysynced.db'}")
    counter = SharedCounter()
    instances = 4
    actions = [
        SyncedScheduler(store, clock=lambda: NOW).build_action(
            "digest", "0 * * * *", counter.action_for(i)
        )
        for i in range(instances)
    ]
    barrier = threading.Barrier(instances)

    def fire(i):
        barrier.wait()
        actions[i]()

    threads = [threading.Thread(target=fire, args=(i,)) for i in range(instances)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=20)

    assert len(counter.calls) == 1
    assert store.get("digest") == 1792234800000
