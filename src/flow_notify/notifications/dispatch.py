# src/flow_notify/notifications/dispatch.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..core.ports import NotificationListener
from .models import NotificationType, new_schedule_id

logger = logging.getLogger(__name__)


def format_fire_time(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000).astimezone().strftime("%H:%M")


@dataclass(slots=True, frozen=True)
class NotificationEvent:
    """
    What the scheduler publishes when a record fires.

    The scheduler decides:
    - when a record is due
    - the delivery id and fire timestamp

    The renderer decides:
    - how (and whether) to show it, and for how long
    """

    delivery_id: str
    schedule_id: str
    payload: dict[str, Any]
    fired_at: str
    fired_at_ms: int

    @classmethod
    def create(cls, *, schedule_id: str, payload: dict[str, Any], fired_at_ms: int) -> NotificationEvent:
        return cls(
            delivery_id=new_schedule_id(),
            schedule_id=schedule_id,
            payload=dict(payload),
            fired_at=format_fire_time(fired_at_ms),
            fired_at_ms=fired_at_ms,
        )

    def to_notification(self) -> dict[str, Any]:
        """Renderer-shaped notification: payload fields plus id/time."""
        out: dict[str, Any] = {"read": False, "type": NotificationType.SYSTEM.value}
        out.update(self.payload)
        out["id"] = self.delivery_id
        out["time"] = self.fired_at
        return out


class NotificationDispatcher:
    """
    Explicit observer registry between the scheduler and renderers.

    Delivery is fire-and-forget: a failing listener is logged and skipped,
    the scheduler never learns about it.
    """

    def __init__(self) -> None:
        self._listeners: list[NotificationListener] = []

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            # Identity, not equality: listeners may be value-equal dataclasses.
            for i, registered in enumerate(self._listeners):
                if registered is listener:
                    del self._listeners[i]
                    break

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, event: NotificationEvent) -> int:
        delivered = 0
        for listener in list(self._listeners):
            try:
                listener(event)
                delivered += 1
            except Exception:
                logger.exception(
                    "Notification listener failed delivery_id=%s schedule_id=%s",
                    event.delivery_id,
                    event.schedule_id,
                )
        if not self._listeners:
            logger.debug("No listeners for schedule_id=%s", event.schedule_id)
        return delivered
