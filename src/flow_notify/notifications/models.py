# src/flow_notify/notifications/models.py

from __future__ import annotations

import json
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class NotificationType(StrEnum):
    """Notification categories understood by the renderer."""

    AI = "AI"
    SYSTEM = "SYSTEM"
    STREAK = "STREAK"
    FREEZE = "FREEZE"


class RecurrenceInterval(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_schedule_id() -> str:
    return str(uuid.uuid4())


# Upper bound for stored epoch-ms values (year 9999).
MAX_EPOCH_MS = 253_402_300_799_000


def _epoch_ms(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"record.{field} must be a number")
    # Also rejects inf and nan.
    if not 0 <= value <= MAX_EPOCH_MS:
        raise ValueError(f"record.{field} is out of range: {value!r}")
    return int(value)


def validate_payload(payload: Any) -> dict[str, Any]:
    """
    Check a notification body against the renderer contract.

    Required:
    - title: non-empty string
    Optional:
    - message: string
    - type: one of NotificationType (defaults to SYSTEM when rendered)
    - read: bool

    Unknown keys are kept; the scheduler passes the body through verbatim.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("payload must be a mapping")

    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValueError("payload.title is required")

    if "message" in payload and not isinstance(payload["message"], str):
        raise ValueError("payload.message must be a string")

    if "type" in payload:
        try:
            NotificationType(payload["type"])
        except ValueError:
            raise ValueError(f"payload.type is not a notification type: {payload['type']!r}") from None

    if "read" in payload and not isinstance(payload["read"], bool):
        raise ValueError("payload.read must be a bool")

    # Must survive the persisted snapshot.
    try:
        json.dumps(payload, allow_nan=False)
    except (TypeError, ValueError):
        raise ValueError("payload must be JSON-serializable") from None

    return dict(payload)


@dataclass(slots=True, frozen=True)
class Recurrence:
    """
    Cadence of a recurring chain.

    `interval` stays a plain string so that a value this version does not know
    survives a load/save cycle; it simply ends the chain when the record fires.
    `remaining` counts occurrences left including the current one (None = unbounded).
    """

    interval: str
    remaining: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"interval": self.interval, "remaining": self.remaining}

    @classmethod
    def from_dict(cls, raw: Any) -> Recurrence:
        if not isinstance(raw, Mapping):
            raise ValueError("recurring must be a mapping")
        interval = raw.get("interval")
        if not isinstance(interval, str) or not interval:
            raise ValueError("recurring.interval is required")
        remaining = raw.get("remaining")
        if remaining is not None and (isinstance(remaining, bool) or not isinstance(remaining, int)):
            raise ValueError("recurring.remaining must be an int")
        return cls(interval=interval, remaining=remaining)


@dataclass(slots=True, frozen=True)
class ScheduleRecord:
    id: str
    payload: dict[str, Any]
    scheduled_time: int  # epoch ms
    recurring: Recurrence | None
    created: int  # epoch ms, diagnostics only

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "payload": dict(self.payload),
            "scheduled_time": self.scheduled_time,
            "recurring": self.recurring.to_dict() if self.recurring else None,
            "created": self.created,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> ScheduleRecord:
        if not isinstance(raw, Mapping):
            raise ValueError("record must be a mapping")

        rec_id = raw.get("id")
        if not isinstance(rec_id, str) or not rec_id:
            raise ValueError("record.id is required")

        payload = raw.get("payload")
        if not isinstance(payload, Mapping):
            raise ValueError("record.payload must be a mapping")

        scheduled_time = _epoch_ms(raw.get("scheduled_time"), "scheduled_time")
        created = _epoch_ms(raw.get("created", 0), "created")

        recurring_raw = raw.get("recurring")
        recurring = Recurrence.from_dict(recurring_raw) if recurring_raw is not None else None

        return cls(
            id=rec_id,
            payload=dict(payload),
            scheduled_time=scheduled_time,
            recurring=recurring,
            created=created,
        )
