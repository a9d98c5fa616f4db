"""
Key-value store backends for the dedup ledger.

Two implementations share the KVStore interface:
1. MemoryKVStore: process-local dictionary, used for tests and dry runs
2. SQLiteKVStore: durable single-file store

Both honour optional per-key expiry and expose prefix listing with a
continuation cursor, at most 1000 keys per page.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
import sqlite3
import threading
import time
from typing import Callable


MAX_PAGE_SIZE = 1000


@dataclass
class ListPage:
    """One page of a prefix listing.

    Attributes:
        keys: Keys in lexical order
        cursor: Continuation token for the next page, None when complete
        complete: True when no keys remain after this page
    """
    keys: list[str]
    cursor: str | None
    complete: bool


class KVStore(ABC):
    """Minimal durable key-value interface used by the ledger."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or None when absent or expired."""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: str, ttl: int | None = None) -> None:
        """Store ``value`` under ``key``, expiring after ``ttl`` seconds if given."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list(self, prefix: str = "", limit: int = MAX_PAGE_SIZE, cursor: str | None = None) -> ListPage:
        """Return one page of keys starting with ``prefix``."""
        raise NotImplementedError

    def close(self) -> None:
        return None


def _expires_at(ttl: int | None, now: float) -> float | None:
    if ttl is None:
        return None
    if ttl <= 0:
        raise ValueError("ttl must be a positive number of seconds")
    return now + ttl


class MemoryKVStore(KVStore):
    """Dictionary-backed store; the clock is injectable for expiry tests."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._data: dict[str, tuple[str, float | None]] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at is not None and expires_at <= self._clock():
                del self._data[key]
                return None
            return value

    def put(self, key: str, value: str, ttl: int | None = None) -> None:
        with self._lock:
            self._data[key] = (value, _expires_at(ttl, self._clock()))

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list(self, prefix: str = "", limit: int = MAX_PAGE_SIZE, cursor: str | None = None) -> ListPage:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        now = self._clock()
        with self._lock:
            live = sorted(
                key
                for key, (_, expires_at) in self._data.items()
                if key.startswith(prefix) and (expires_at is None or expires_at > now)
            )
        if cursor is not None:
            live = [key for key in live if key > cursor]
        page = live[:limit]
        complete = len(live) <= limit
        return ListPage(keys=page, cursor=None if complete else page[-1], complete=complete)


class SQLiteKVStore(KVStore):
    """SQLite-backed store with a single ``kv`` table.

    Expired rows are invisible to reads and listings and are purged lazily.
    """

    def __init__(self, path: str | Path, clock: Callable[[], float] = time.time):
        self.path = Path(path)
        if str(self.path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = threading.Lock()
        self.conn = sqlite3.connect(str(self.path), check_same_thread=False)
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS kv ("
            " key TEXT PRIMARY KEY,"
            " value TEXT NOT NULL,"
            " expires_at REAL"
            ")"
        )
        self.conn.commit()

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self.conn.execute(
                "SELECT value FROM kv WHERE key = ? AND (expires_at IS NULL OR expires_at > ?)",
                (key, self._clock()),
            ).fetchone()
        return row[0] if row else None

    def put(self, key: str, value: str, ttl: int | None = None) -> None:
        now = self._clock()
        with self._lock:
            self.conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, expires_at) VALUES (?, ?, ?)",
                (key, value, _expires_at(ttl, now)),
            )
            self.conn.execute(
                "DELETE FROM kv WHERE expires_at IS NOT NULL AND expires_at <= ?", (now,)
            )
            self.conn.commit()

    def delete(self, key: str) -> None:
        with self._lock:
            self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            self.conn.commit()

    def list(self, prefix: str = "", limit: int = MAX_PAGE_SIZE, cursor: str | None = None) -> ListPage:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        # substr comparison keeps LIKE wildcards in the prefix literal
        query = (
            "SELECT key FROM kv WHERE substr(key, 1, ?) = ?"
            " AND (expires_at IS NULL OR expires_at > ?)"
        )
        params: list[object] = [len(prefix), prefix, self._clock()]
        if cursor is not None:
            query += " AND key > ?"
            params.append(cursor)
        query += " ORDER BY key LIMIT ?"
        params.append(limit + 1)
        with self._lock:
            rows = self.conn.execute(query, params).fetchall()
        keys = [row[0] for row in rows[:limit]]
        complete = len(rows) <= limit
        return ListPage(keys=keys, cursor=None if complete else keys[-1], complete=complete)

    def close(self) -> None:
        with self._lock:
            self.conn.close()


def create_store(backend: str, path: str | Path | None = None) -> KVStore:
    """Build a store for the configured backend name."""
    name = (backend or "sqlite").lower().strip()
    if name == "memory":
        return MemoryKVStore()
    if name == "sqlite":
        if not path:
            raise ValueError("SQLite ledger backend requires a path")
        return SQLiteKVStore(path)
    raise ValueError(f"Unsupported ledger backend: {backend}. Supported: memory, sqlite")
