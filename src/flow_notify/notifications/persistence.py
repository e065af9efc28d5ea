# src/flow_notify/notifications/persistence.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.ports import KeyValueStorage
from .models import ScheduleRecord

logger = logging.getLogger(__name__)


class SchedulePersistence:
    """
    Snapshot persistence for the pending schedule list.

    The whole list is stored under one key and rewritten on every mutation.
    Neither method raises: a broken snapshot reads as empty and a failed write
    is logged and reported as False.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def load(self, key: str) -> list[ScheduleRecord]:
        try:
            raw = self._storage.get(key, [])
        except Exception:
            logger.exception("Failed to read scheduled notifications key=%s", key)
            return []

        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Scheduled notifications under key=%s are not a list; starting empty", key)
            return []

        out: list[ScheduleRecord] = []
        seen: set[str] = set()
        for item in raw:
            try:
                rec = ScheduleRecord.from_dict(item)
            except (ValueError, TypeError, OverflowError) as e:
                logger.warning("Dropping malformed scheduled notification: %s", e)
                continue
            if rec.id in seen:
                logger.warning("Dropping duplicate scheduled notification id=%s", rec.id)
                continue
            seen.add(rec.id)
            out.append(rec)

        logger.debug("Loaded %d scheduled notifications key=%s", len(out), key)
        return out

    def save(self, key: str, records: Iterable[ScheduleRecord]) -> bool:
        try:
            self._storage.set(key, [r.to_dict() for r in records])
            return True
        except Exception:
            logger.exception("Failed to save scheduled notifications key=%s", key)
            return False
