# src/flow_notify/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the notification core.

The scheduler depends on Protocols instead of concrete implementations.
This keeps storage backends, the timer source and renderers swappable
and lets tests drive time by hand.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..notifications.dispatch import NotificationEvent


class KeyValueStorage(Protocol):
    """
    Durable key-value capability.

    Both methods are fail-soft:
    - get() returns `fallback` on missing or unreadable data
    - set() logs failures instead of raising
    """

    def get(self, key: str, fallback: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerFactory(Protocol):
    """
    Source of one-shot timers (asyncio.AbstractEventLoop satisfies this).

    Callbacks must run on the scheduler's own thread and never overlap.
    """

    def call_later(self, delay: float, callback: Callable[..., object], *args: Any) -> TimerHandle: ...


class NotificationListener(Protocol):
    """Renderer-side port: receives fired notifications. Must not block."""

    def __call__(self, event: NotificationEvent) -> None: ...
