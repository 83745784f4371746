from __future__ import annotations

import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from queue import Empty, Full, Queue
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS cache_entries ("
    "  namespace TEXT NOT NULL,"
    "  key TEXT NOT NULL,"
    "  value TEXT NOT NULL,"
    "  stored_at REAL NOT NULL,"
    "  expires_at REAL NOT NULL,"
    "  PRIMARY KEY (namespace, key)"
    ")"
)


class SqliteConnectionPool:
    """Thread-safe SQLite connection pool.

    An in-memory database exists only inside the connection that created it,
    so ``":memory:"`` pools hand out one shared connection guarded by a lock.
    """

    def __init__(self, db_path: Path | str, max_connections: int = 5) -> None:
        self._db_path = db_path
        self._in_memory = str(db_path) == MEMORY
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=max_connections)
        self._schema_lock = threading.Lock()
        self._schema_initialized = False
        self._shared: sqlite3.Connection | None = None
        self._shared_lock = threading.Lock()

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if self._schema_initialized:
            return
        with self._schema_lock:
            if self._schema_initialized:
                return
            conn.execute(_SCHEMA)
            conn.commit()
            self._schema_initialized = True

    def _create_connection(self) -> sqlite3.Connection:
        if self._in_memory:
            conn = sqlite3.connect(MEMORY, check_same_thread=False)
        else:
            path = Path(self._db_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        self._ensure_schema(conn)
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Acquire a connection, returning it to the pool when done."""
        if self._in_memory:
            with self._shared_lock:
                if self._shared is None:
                    self._shared = self._create_connection()
                yield self._shared
            return

        try:
            conn = self._pool.get_nowait()
        except Empty:
            conn = self._create_connection()
        try:
            yield conn
        finally:
            try:
                self._pool.put_nowait(conn)
            except Full:
                conn.close()


class SqliteCacheStore:
    def __init__(self, db_path: Path | str, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._pool = SqliteConnectionPool(db_path)

    def get(self, namespace: str, key: str) -> str | None:
        with self._pool.connection() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM cache_entries WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
            if row is None:
                return None
            value, expires_at = row
            if self._clock() >= expires_at:
                logger.debug("Expired cache entry %s/%s", namespace, key)
                conn.execute("DELETE FROM cache_entries WHERE namespace = ? AND key = ?", (namespace, key))
                conn.commit()
                return None
            return value

    def put(self, namespace: str, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        with self._pool.connection() as conn:
            conn.execute(
                "INSERT INTO cache_entries (namespace, key, value, stored_at, expires_at) VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(namespace, key) DO UPDATE SET "
                "value = excluded.value, stored_at = excluded.stored_at, expires_at = excluded.expires_at",
                (namespace, key, value, now, now + ttl_seconds),
            )
            conn.commit()

    def invalidate(self, namespace: str, key: str | None = None) -> None:
        with self._pool.connection() as conn:
            if key is not None:
                conn.execute("DELETE FROM cache_entries WHERE namespace = ? AND key = ?", (namespace, key))
            else:
                conn.execute("DELETE FROM cache_entries WHERE namespace = ?", (namespace,))
            conn.commit()

    def purge_expired(self) -> int:
        """Delete every expired entry and return how many were removed."""
        with self._pool.connection() as conn:
            cursor = conn.execute("DELETE FROM cache_entries WHERE expires_at <= ?", (self._clock(),))
            conn.commit()
            return cursor.rowcount
