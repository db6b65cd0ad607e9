from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from braiins_pool_bot.errors import StoreError


class KeyValueStore:
    """Partitioned key -> text store backed by a single SQLite table."""

    def __init__(self, db_path: str, partitions: tuple[str, ...] = ()):
        self._db_path = db_path
        self._partitions = frozenset(partitions)
        self._lock = threading.Lock()
        try:
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._initialize_schema()
        except (sqlite3.Error, OSError) as ex:
            raise StoreError(f"Cannot open store at {db_path}") from ex

    def close(self) -> None:
        logger.trace("Closing store")
        self._conn.close()

    def get(self, partition: str, key: str) -> str | None:
        self._check_partition(partition)
        with self._guard("read"):
            row = self._conn.execute(
                "SELECT value FROM kv WHERE partition = ? AND key = ? LIMIT 1",
                (partition, key),
            ).fetchone()
        return None if row is None else row[0]

    def put(self, partition: str, key: str, value: str) -> None:
        self._check_partition(partition)
        with self._guard("write"), self.transaction():
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (partition, key, value) VALUES (?, ?, ?)",
                (partition, key, value),
            )

    def delete(self, partition: str, key: str) -> bool:
        self._check_partition(partition)
        with self._guard("delete"), self.transaction():
            cursor = self._conn.execute(
                "DELETE FROM kv WHERE partition = ? AND key = ?",
                (partition, key),
            )
        return cursor.rowcount > 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
        except BaseException:
            self._conn.rollback()
            raise
        else:
            self._conn.commit()

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except sqlite3.Error as ex:
                raise StoreError(f"Store {operation} failed") from ex

    def _check_partition(self, partition: str) -> None:
        if self._partitions and partition not in self._partitions:
            raise StoreError(f"Unknown partition: {partition!r}")

    def _initialize_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv (
                partition TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                PRIMARY KEY (partition, key)
            );
            """
        )
        self._conn.commit()
