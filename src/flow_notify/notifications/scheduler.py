# src/flow_notify/notifications/scheduler.py

from __future__ import annotations

"""
Notification scheduler.

Owns:
- the pending schedule list (persisted as a whole snapshot on every mutation),
- a map of live timers keyed by schedule id.

On construction it reconciles the persisted list against the clock:
future records get a timer, overdue ones fire right away in list order.
Everything runs on one event loop thread; timer callbacks never overlap.
"""

import asyncio
import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

from ..core.ports import TimerFactory, TimerHandle
from .dispatch import NotificationDispatcher, NotificationEvent
from .models import (
    Recurrence,
    RecurrenceInterval,
    ScheduleRecord,
    new_schedule_id,
    now_ms,
    validate_payload,
)
from .persistence import SchedulePersistence
from .recurrence import next_occurrence

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "flow_scheduled_notifications_v1"
DEFAULT_MAX_RECORDS = 50


def _coerce_recurrence(recurring: Recurrence | Mapping[str, Any] | None) -> Recurrence | None:
    if recurring is None:
        return None
    rec = recurring if isinstance(recurring, Recurrence) else Recurrence.from_dict(recurring)
    try:
        RecurrenceInterval(rec.interval)
    except ValueError:
        raise ValueError(f"unknown recurrence interval: {rec.interval!r}") from None
    if rec.remaining is not None and rec.remaining < 1:
        raise ValueError("recurring.remaining must be >= 1")
    return rec


class NotificationScheduler:
    def __init__(
        self,
        persistence: SchedulePersistence,
        dispatcher: NotificationDispatcher,
        *,
        timers: TimerFactory | None = None,
        clock: Callable[[], int] = now_ms,
        storage_key: str = DEFAULT_STORAGE_KEY,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> None:
        """
        Build the scheduler and reconcile persisted state.

        `timers` defaults to the running asyncio loop, so construct it from
        inside the loop (or pass the loop explicitly).
        Overdue records are dispatched before this returns: register renderers
        on `dispatcher` first.
        """
        self._persistence = persistence
        self._dispatcher = dispatcher
        self._timers_source: TimerFactory = timers if timers is not None else asyncio.get_running_loop()
        self._clock = clock
        self._key = storage_key
        self._max_records = max(1, int(max_records))

        self._timers: dict[str, TimerHandle] = {}
        self._pending: list[ScheduleRecord] = []

        self._reconcile()

    # ---- public API ----

    def schedule(
        self,
        payload: Mapping[str, Any],
        delay_ms: int | float = 0,
        recurring: Recurrence | Mapping[str, Any] | None = None,
    ) -> str:
        """
        Persist a notification intent and arm its timer.

        A zero or negative delay means "due now" but still goes through
        persistence and a timer, never a synchronous dispatch.
        Raises ValueError for a malformed payload or recurrence.
        """
        body = validate_payload(payload)
        rec = _coerce_recurrence(recurring)

        now = self._clock()
        record = ScheduleRecord(
            id=new_schedule_id(),
            payload=body,
            scheduled_time=now + max(0, int(delay_ms)),
            recurring=rec,
            created=now,
        )

        self._append(record)
        self._arm(record)
        logger.info(
            "Scheduled notification id=%s due_in_ms=%s recurring=%s",
            record.id,
            record.scheduled_time - now,
            rec.interval if rec else None,
        )
        return record.id

    def cancel(self, schedule_id: str) -> bool:
        """Stop and forget a schedule. Returns True iff it was still pending."""
        handle = self._timers.pop(schedule_id, None)
        if handle is not None:
            handle.cancel()

        removed = self._remove(schedule_id)
        if removed:
            logger.info("Cancelled notification id=%s", schedule_id)
        else:
            logger.debug("Cancel ignored for unknown id=%s", schedule_id)
        return removed

    def get_scheduled(self) -> list[ScheduleRecord]:
        """Snapshot of pending records; payloads are copies."""
        return [replace(r, payload=copy.deepcopy(r.payload)) for r in self._pending]

    @property
    def pending_timer_count(self) -> int:
        return len(self._timers)

    def shutdown(self) -> None:
        """
        Cancel live timers without touching persistence.

        Pending records stay stored and are reconciled by the next instance.
        """
        for handle in self._timers.values():
            handle.cancel()
        count = len(self._timers)
        self._timers.clear()
        logger.info("Notification scheduler stopped; %d timers released", count)

    # ---- internals ----

    def _reconcile(self) -> None:
        loaded = self._persistence.load(self._key)[-self._max_records :]
        self._pending = list(loaded)
        now = self._clock()

        overdue = 0
        for record in loaded:
            # A regenerated record may have evicted this one already.
            if not self._is_pending(record.id):
                continue
            if record.scheduled_time > now:
                self._arm(record)
            else:
                overdue += 1
                self._fire(record)

        logger.info(
            "Reconciled %d scheduled notifications (fired_overdue=%d armed=%d)",
            len(loaded),
            overdue,
            len(self._timers),
        )

    def _is_pending(self, schedule_id: str) -> bool:
        return any(r.id == schedule_id for r in self._pending)

    def _arm(self, record: ScheduleRecord) -> None:
        delay_s = max(0, record.scheduled_time - self._clock()) / 1000.0
        self._timers[record.id] = self._timers_source.call_later(delay_s, self._fire, record)

    def _fire(self, record: ScheduleRecord) -> None:
        event = NotificationEvent.create(
            schedule_id=record.id,
            payload=record.payload,
            fired_at_ms=self._clock(),
        )
        self._dispatcher.publish(event)
        logger.info("Fired notification id=%s delivery_id=%s", record.id, event.delivery_id)

        if record.recurring is not None:
            nxt = next_occurrence(record, new_id=new_schedule_id())
            if nxt is not None:
                self._append(nxt)
                self._arm(nxt)
                logger.debug(
                    "Regenerated id=%s -> id=%s remaining=%s",
                    record.id,
                    nxt.id,
                    nxt.recurring.remaining if nxt.recurring else None,
                )

        # Cleanup only after the next occurrence is stored.
        self._timers.pop(record.id, None)
        self._remove(record.id)

    def _append(self, record: ScheduleRecord) -> None:
        self._pending.append(record)
        overflow = len(self._pending) - self._max_records
        if overflow > 0:
            evicted = self._pending[:overflow]
            del self._pending[:overflow]
            for old in evicted:
                handle = self._timers.pop(old.id, None)
                if handle is not None:
                    handle.cancel()
                logger.warning("Evicted scheduled notification id=%s (limit %d)", old.id, self._max_records)
        self._persist()

    def _remove(self, schedule_id: str) -> bool:
        before = len(self._pending)
        self._pending = [r for r in self._pending if r.id != schedule_id]
        if len(self._pending) == before:
            return False
        self._persist()
        return True

    def _persist(self) -> None:
        if not self._persistence.save(self._key, self._pending):
            logger.warning("Scheduled notifications not persisted; keeping in-memory state")
