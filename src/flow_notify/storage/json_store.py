# src/flow_notify/storage/json_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileKeyValueStore:
    """One JSON file per key under `directory`. Writes are atomic (tmp + replace)."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", key) or "_"
        return self._dir / f"{safe}.json"

    def get(self, key: str, fallback: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return fallback
        try:
            return json.loads(path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Storage reset for key=%s (unreadable %s)", key, path, exc_info=True)
            return fallback

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        try:
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(value, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, path)
            with contextlib.suppress(Exception):
                os.chmod(path, 0o600)
        except (OSError, TypeError, ValueError):
            logger.exception("Storage write failed key=%s path=%s", key, path)
