"""
Key-value storage backends.

Components:
- sqlite_store.py: SQLite table of JSON values (default)
- json_store.py: one JSON file per key
- memory_store.py: process-local dict, nothing survives a restart
"""

from __future__ import annotations

from ..core.ports import KeyValueStorage
from .json_store import JsonFileKeyValueStore
from .memory_store import InMemoryKeyValueStore
from .sqlite_store import SQLiteKeyValueStore

BACKENDS = ("sqlite", "json", "memory")


def open_storage(settings) -> KeyValueStorage:
    """Build the backend named by settings.storage_backend."""
    backend = str(getattr(settings, "storage_backend", "sqlite")).strip().lower()

    if backend == "sqlite":
        return SQLiteKeyValueStore(settings.storage_path)
    if backend == "json":
        return JsonFileKeyValueStore(settings.storage_path)
    if backend == "memory":
        return InMemoryKeyValueStore()

    raise ValueError(f"Unknown storage backend: {backend!r} (expected one of {', '.join(BACKENDS)})")


__all__ = [
    "BACKENDS",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SQLiteKeyValueStore",
    "open_storage",
]
