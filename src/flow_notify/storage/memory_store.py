# src/flow_notify/storage/memory_store.py

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    """
    Process-local store for ephemeral runs.

    Values are kept JSON-encoded so callers see the same copy semantics
    as the durable backends.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str, fallback: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            return fallback

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode value for key=%s", key)

    def set_raw(self, key: str, raw: str) -> None:
        """Store an already-encoded value as-is."""
        self._data[key] = raw
