# tests/fakes.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from flow_notify.notifications.dispatch import NotificationEvent


@dataclass
class _FakeHandle:
    due_ms: int
    seq: int
    callback: Callable[..., object]
    args: tuple[Any, ...]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """
    Deterministic TimerFactory + clock.

    - call_later() only records the timer
    - advance(ms) moves the clock and runs due callbacks in (due, arm order)
    - now() is the scheduler clock (epoch ms)
    """

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self._now = start_ms
        self._seq = 0
        self._handles: list[_FakeHandle] = []

    def now(self) -> int:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., object], *args: Any) -> _FakeHandle:
        self._seq += 1
        handle = _FakeHandle(
            due_ms=self._now + int(round(delay * 1000)),
            seq=self._seq,
            callback=callback,
            args=args,
        )
        self._handles.append(handle)
        return handle

    @property
    def live(self) -> list[_FakeHandle]:
        return [h for h in self._handles if not h.cancelled]

    def advance(self, ms: int) -> None:
        target = self._now + ms
        while True:
            due = [h for h in self.live if h.due_ms <= target]
            if not due:
                break
            h = min(due, key=lambda x: (x.due_ms, x.seq))
            self._handles.remove(h)
            self._now = max(self._now, h.due_ms)
            h.callback(*h.args)
        self._now = target

    def set_time(self, ts_ms: int) -> None:
        """Jump the wall clock without running timers (simulates downtime)."""
        self._now = ts_ms


@dataclass
class RecordingListener:
    events: list[NotificationEvent] = field(default_factory=list)

    def __call__(self, event: NotificationEvent) -> None:
        self.events.append(event)

    @property
    def titles(self) -> list[str]:
        return [e.payload.get("title") for e in self.events]


class FailingStorage:
    """KeyValueStorage whose writes (and optionally reads) raise."""

    def __init__(self, *, fail_reads: bool = False, initial: Any = None) -> None:
        self.fail_reads = fail_reads
        self.initial = initial
        self.write_attempts = 0

    def get(self, key: str, fallback: Any = None) -> Any:
        if self.fail_reads:
            raise OSError("storage unavailable")
        return fallback if self.initial is None else self.initial

    def set(self, key: str, value: Any) -> None:
        self.write_attempts += 1
        raise OSError("disk full")
