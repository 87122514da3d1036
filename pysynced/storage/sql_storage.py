# pysynced/storage/sql_storage.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Dict, Optional

from sqlalchemy import Engine, create_engine, select
from sqlalchemy.orm import sessionmaker

from pysynced.common.sql_models import Base, WatermarkModel
from pysynced.locking.sql_lock import SqlLock
from pysynced.storage.base import WatermarkStore

logger = logging.getLogger(__name__)


class SqlWatermarkStore(WatermarkStore):
    def __init__(
        self,
        connection_url: Optional[str] = None,
        engine: Optional[Engine] = None,
        create_tables: bool = True,
        key_prefix: str = "",
    ) -> None:
        if engine is None and connection_url is None:
            raise ValueError("connection_url or engine is required")
        self.engine = engine or create_engine(connection_url)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        if create_tables:
            Base.metadata.create_all(self.engine)
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[int]:
        with self._session_factory() as session:
            return session.execute(
                select(WatermarkModel.value).where(WatermarkModel.key == self._key(key))
            ).scalar_one_or_none()

    def set(self, key: str, value: int) -> None:
        with self._session_factory.begin() as session:
            entry = session.get(WatermarkModel, self._key(key))
            if entry:
                entry.value = int(value)
                entry.updated_at = datetime.now(UTC)
            else:
                session.add(
                    WatermarkModel(
                        key=self._key(key),
                        value=int(value),
                        updated_at=datetime.now(UTC),
                    )
                )
        logger.debug(f"Watermark {key!r} set to {value}")

    def delete(self, key: str) -> None:
        with self._session_factory.begin() as session:
            entry = session.get(WatermarkModel, self._key(key))
            if entry:
                session.delete(entry)

    def list_watermarks(self) -> Dict[str, int]:
        with self._session_factory() as session:
            rows = session.execute(
                select(WatermarkModel.key, WatermarkModel.value)
                .where(WatermarkModel.key.startswith(self.key_prefix))
                .order_by(WatermarkModel.key)
            ).all()
        return {key[len(self.key_prefix):]: value for key, value in rows}

    def default_lock(self) -> SqlLock:
        return SqlLock(self._session_factory, key_prefix=self.key_prefix)
