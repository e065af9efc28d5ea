# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from flow_notify.notifications.dispatch import NotificationDispatcher
from flow_notify.notifications.persistence import SchedulePersistence
from flow_notify.notifications.scheduler import NotificationScheduler
from flow_notify.storage.memory_store import InMemoryKeyValueStore

from .fakes import FakeTimers, RecordingListener

STORAGE_KEY = "flow_scheduled_notifications_v1"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="flow-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path / "data",
        storage_backend="sqlite",
        storage_path=tmp_path / "data" / "notifications.sqlite3",
        storage_key=STORAGE_KEY,
        max_scheduled=50,
    )


@pytest.fixture()
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture()
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture()
def make_scheduler(storage, timers, listener):
    """Build a scheduler over the shared storage (call again to simulate a restart)."""

    def _make(**kwargs) -> NotificationScheduler:
        dispatcher = NotificationDispatcher()
        dispatcher.subscribe(listener)
        return NotificationScheduler(
            SchedulePersistence(kwargs.pop("storage", storage)),
            dispatcher,
            timers=timers,
            clock=timers.now,
            storage_key=STORAGE_KEY,
            **kwargs,
        )

    return _make
