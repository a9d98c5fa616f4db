"""
Dedup ledger recording which feed items have been fully processed.

Keys are ``post:{guid}``; values are JSON objects
``{processed, timestamp, title, slug, url}``.

Failure policy is asymmetric:
- reads fail open (``is_processed`` returns False on error)
- writes fail closed (``mark_processed`` and ``forget`` raise LedgerError)
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
import json
import logging
from typing import Callable

from ..core.types import LedgerEntry
from ..errors import LedgerError
from ..utils.logging import log_event
from .store import KVStore, MAX_PAGE_SIZE


KEY_PREFIX = "post:"


def ledger_key(guid: str) -> str:
    return f"{KEY_PREFIX}{guid}"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Ledger:
    """Ledger operations over a KVStore."""

    def __init__(
        self,
        store: KVStore,
        logger: logging.Logger | None = None,
        page_size: int = MAX_PAGE_SIZE,
        default_ttl: int | None = None,
        clock: Callable[[], str] = _utc_timestamp,
        max_workers: int = 8,
    ):
        self.store = store
        self.logger = logger
        self.page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        self.default_ttl = default_ttl
        self._clock = clock
        self._max_workers = max_workers

    def is_processed(self, guid: str) -> bool:
        """Return True when a ledger entry exists; False on any read error."""
        try:
            return self.store.get(ledger_key(guid)) is not None
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Ledger read failed",
                level=logging.WARNING,
                event="ledger_read_failed",
                guid=guid,
                error=f"{type(exc).__name__}: {exc}",
            )
            return False

    def batch_is_processed(self, guids: list[str]) -> dict[str, bool]:
        """Check many guids with concurrent point reads.

        No atomicity across the batch; each read fails open independently.
        """
        unique = list(dict.fromkeys(guids))
        if not unique:
            return {}
        workers = max(1, min(self._max_workers, len(unique)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            flags = list(pool.map(self.is_processed, unique))
        return dict(zip(unique, flags))

    def mark_processed(
        self,
        guid: str,
        *,
        title: str,
        slug: str,
        url: str,
        ttl: int | None = None,
    ) -> LedgerEntry:
        """Write the ledger entry for ``guid``.

        Raises:
            LedgerError: If the store write fails
        """
        entry = LedgerEntry(
            guid=guid,
            completed_at=self._clock(),
            title=title,
            slug=slug,
            source_url=url,
        )
        effective_ttl = ttl if ttl is not None else self.default_ttl
        try:
            self.store.put(ledger_key(guid), json.dumps(entry.to_json()), ttl=effective_ttl)
        except Exception as exc:
            log_event(
                self.logger,
                "Ledger write failed",
                level=logging.ERROR,
                event="ledger_write_failed",
                guid=guid,
                error=f"{type(exc).__name__}: {exc}",
            )
            raise LedgerError(f"Failed to mark {guid} as processed: {exc}") from exc
        log_event(self.logger, "Ledger marked", event="ledger_marked", guid=guid, slug=slug)
        return entry

    def get_entry(self, guid: str) -> LedgerEntry | None:
        """Return the stored entry, or None when absent or unreadable."""
        try:
            raw = self.store.get(ledger_key(guid))
            if raw is None:
                return None
            return LedgerEntry.from_json(guid, json.loads(raw))
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Ledger read failed",
                level=logging.WARNING,
                event="ledger_read_failed",
                guid=guid,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None

    def forget(self, guid: str) -> None:
        """Delete the entry so the item is reprocessed on the next run."""
        try:
            self.store.delete(ledger_key(guid))
        except Exception as exc:
            raise LedgerError(f"Failed to delete ledger entry for {guid}: {exc}") from exc
        log_event(self.logger, "Ledger entry deleted", event="ledger_forgot", guid=guid)

    def list_all(self, limit: int = 1000) -> list[str]:
        """Return up to ``limit`` processed guids, following list cursors."""
        guids: list[str] = []
        cursor: str | None = None
        while len(guids) < limit:
            page = self.store.list(
                KEY_PREFIX,
                limit=min(limit - len(guids), self.page_size),
                cursor=cursor,
            )
            guids.extend(key[len(KEY_PREFIX):] for key in page.keys)
            if page.complete or page.cursor is None:
                break
            cursor = page.cursor
        return guids[:limit]

    def count(self) -> int:
        """Count all ledger entries by paging through the prefix."""
        total = 0
        cursor: str | None = None
        while True:
            page = self.store.list(KEY_PREFIX, limit=self.page_size, cursor=cursor)
            total += len(page.keys)
            if page.complete or page.cursor is None:
                return total
            cursor = page.cursor
