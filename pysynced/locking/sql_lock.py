# pysynced/locking/sql_lock.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import uuid4

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from pysynced.common.exceptions import LockAcquisitionError
from pysynced.locking.base import DistributedLock
from pysynced.common.sql_models import LockModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SqlLockToken:
    name: str
    holder: str


class SqlLock(DistributedLock):
    """
    Insert-or-fail lock rows in ``pysynced_locks``.

    The primary key on the lock name makes a second insert fail while the row
    exists; waiters poll every ``poll_interval`` seconds. With ``ttl_seconds``
    set, rows older than the TTL are removed by the next waiter.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        ttl_seconds: Optional[float] = None,
        acquire_timeout: Optional[float] = None,
        poll_interval: float = 0.1,
        instance_id: Optional[str] = None,
        key_prefix: str = "",
    ) -> None:
        self._session_factory = session_factory
        self.ttl_seconds = ttl_seconds
        self.acquire_timeout = acquire_timeout
        self.poll_interval = poll_interval
        self.instance_id = instance_id or str(uuid4())
        self.key_prefix = key_prefix

    def _purge_expired(self, key: str, now: datetime) -> None:
        with self._session_factory.begin() as session:
            result = session.execute(
                delete(LockModel).where(
                    LockModel.name == key,
                    LockModel.expires_at.is_not(None),
                    LockModel.expires_at < now,
                )
            )
            if result.rowcount:
                logger.warning(f"Removed expired lock {key!r}")

    def _try_insert(self, key: str, now: datetime) -> bool:
        expires_at = None
        if self.ttl_seconds is not None:
            expires_at = now + timedelta(seconds=self.ttl_seconds)
        try:
            with self._session_factory.begin() as session:
                session.add(
                    LockModel(
                        name=key,
                        holder=self.instance_id,
                        acquired_at=now,
                        expires_at=expires_at,
                    )
                )
        except IntegrityError:
            return False
        return True

    def acquire(self, name: str) -> SqlLockToken:
        key = f"{self.key_prefix}{name}"
        deadline = None
        if self.acquire_timeout is not None:
            deadline = time.monotonic() + self.acquire_timeout

        while True:
            now = datetime.now(UTC)
            if self.ttl_seconds is not None:
                self._purge_expired(key, now)
            if self._try_insert(key, now):
                logger.debug(f"Acquired lock {key!r} as {self.instance_id}")
                return SqlLockToken(name=key, holder=self.instance_id)
            if deadline is not None and time.monotonic() >= deadline:
                raise LockAcquisitionError(
                    f"Could not acquire lock {name!r} within {self.acquire_timeout}s"
                )
            time.sleep(self.poll_interval)

    def release(self, token: SqlLockToken) -> None:
        with self._session_factory.begin() as session:
            result = session.execute(
                delete(LockModel).where(
                    LockModel.name == token.name,
                    LockModel.holder == token.holder,
                )
            )
        if not result.rowcount:
            logger.warning(f"Lock {token.name!r} was no longer held by {token.holder}")
