# src/flow_notify/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..notifications.dispatch import NotificationDispatcher
from ..notifications.scheduler import NotificationScheduler
from .ports import KeyValueStorage


@dataclass
class AppState:
    # Settings object (config.Settings or a test namespace with the same fields).
    settings: object

    storage: KeyValueStorage
    dispatcher: NotificationDispatcher
    scheduler: NotificationScheduler
