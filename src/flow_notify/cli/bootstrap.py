# src/flow_notify/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, dispatcher and scheduler into AppState.

The scheduler reconciles persisted records while it is being built, so
renderers must be handed in here rather than subscribed afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..config import get_settings
from ..core.ports import NotificationListener, TimerFactory
from ..core.state import AppState
from ..notifications.dispatch import NotificationDispatcher
from ..notifications.models import now_ms
from ..notifications.persistence import SchedulePersistence
from ..notifications.scheduler import NotificationScheduler
from ..storage import open_storage

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "json":
        settings.storage_path.mkdir(parents=True, exist_ok=True)
    else:
        settings.storage_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    listeners: Iterable[NotificationListener] = (),
    timers: TimerFactory | None = None,
    clock: Callable[[], int] = now_ms,
) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    `timers` defaults to the running event loop and `clock` to wall time in
    epoch ms (see NotificationScheduler).
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    storage = open_storage(settings)

    dispatcher = NotificationDispatcher()
    for listener in listeners:
        dispatcher.subscribe(listener)

    scheduler = NotificationScheduler(
        SchedulePersistence(storage),
        dispatcher,
        timers=timers,
        clock=clock,
        storage_key=settings.storage_key,
        max_records=settings.max_scheduled,
    )

    logger.info(
        "Notification scheduler ready backend=%s pending=%d",
        settings.storage_backend,
        len(scheduler.get_scheduled()),
    )
    return AppState(settings=settings, storage=storage, dispatcher=dispatcher, scheduler=scheduler)
