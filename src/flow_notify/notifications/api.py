# src/flow_notify/notifications/api.py

from __future__ import annotations

import logging
import re

from ..core.state import AppState
from .models import NotificationType, Recurrence, ScheduleRecord

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_MS = {"": 1000, "s": 1000, "m": 60_000, "h": 3_600_000, "d": 86_400_000}


def parse_duration(text: str) -> int:
    """
    Parse "90", "30s", "5m", "2h", "1d" into milliseconds.
    A bare number means seconds.
    """
    m = _DURATION_RE.match(text or "")
    if not m:
        raise ValueError(f"invalid duration: {text!r}")
    value, unit = m.groups()
    return int(float(value) * _UNIT_MS[unit.lower()])


def schedule_reminder(
    state: AppState,
    *,
    title: str,
    message: str = "",
    delay_seconds: float = 0,
    kind: NotificationType = NotificationType.SYSTEM,
    interval: str | None = None,
    times: int | None = None,
) -> str:
    """
    Convenience helper: schedule a reminder through state.scheduler.
    `interval` makes it recurring; `times` bounds the number of occurrences.
    """
    recurring = Recurrence(interval=interval, remaining=times) if interval else None
    payload = {"title": title, "message": message, "type": NotificationType(kind).value}
    return state.scheduler.schedule(payload, int(max(0.0, float(delay_seconds)) * 1000), recurring)


def cancel_reminder(state: AppState, schedule_id: str) -> bool:
    return state.scheduler.cancel(schedule_id)


def list_reminders(state: AppState) -> list[ScheduleRecord]:
    return state.scheduler.get_scheduled()
