# src/flow_notify/notifications/recurrence.py

from __future__ import annotations

"""
Recurrence arithmetic for scheduled notifications.

Months are a fixed 30 days, not calendar months.
"""

import logging
from dataclasses import replace

from .models import Recurrence, RecurrenceInterval, ScheduleRecord

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

INTERVAL_MS: dict[str, int] = {
    RecurrenceInterval.DAILY: DAY_MS,
    RecurrenceInterval.WEEKLY: 7 * DAY_MS,
    RecurrenceInterval.MONTHLY: 30 * DAY_MS,
}


def interval_ms(interval: str) -> int | None:
    return INTERVAL_MS.get(interval)


def next_occurrence(record: ScheduleRecord, *, new_id: str) -> ScheduleRecord | None:
    """
    Build the record that follows `record` in its recurring chain.

    Returns None when the record is one-shot, the bounded chain is exhausted
    (remaining <= 1), or the interval is not recognized.
    """
    rec = record.recurring
    if rec is None:
        return None

    if rec.remaining is not None and rec.remaining <= 1:
        logger.debug("Recurring chain ended id=%s", record.id)
        return None

    step = interval_ms(rec.interval)
    if step is None:
        logger.warning("Unknown recurrence interval %r for id=%s; chain ends", rec.interval, record.id)
        return None

    remaining = rec.remaining - 1 if rec.remaining is not None else None

    return replace(
        record,
        id=new_id,
        scheduled_time=record.scheduled_time + step,
        recurring=Recurrence(interval=rec.interval, remaining=remaining),
    )
