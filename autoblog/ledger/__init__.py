"""Durable record of processed feed items."""

from .ledger import KEY_PREFIX, Ledger, ledger_key
from .store import KVStore, ListPage, MemoryKVStore, SQLiteKVStore, create_store

__all__ = [
    "KEY_PREFIX",
    "Ledger",
    "ledger_key",
    "KVStore",
    "ListPage",
    "MemoryKVStore",
    "SQLiteKVStore",
    "create_store",
]
