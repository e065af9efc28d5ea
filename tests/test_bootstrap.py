# tests/test_bootstrap.py

from __future__ import annotations

from dataclasses import replace as dc_replace

import pytest

from flow_notify.cli.bootstrap import create_initial_state
from flow_notify.connectors.console_connector import ConsoleRenderer
from flow_notify.notifications.api import list_reminders, schedule_reminder

from .fakes import FakeTimers, RecordingListener


@pytest.mark.parametrize("backend", ["sqlite", "json"])
def test_pending_reminders_survive_restart(settings, tmp_path, backend) -> None:
    if backend == "json":
        settings.storage_backend = "json"
        settings.storage_path = tmp_path / "data" / "kv"

    timers = FakeTimers()
    listener = RecordingListener()

    state = create_initial_state(settings=settings, listeners=[listener], timers=timers, clock=timers.now)
    schedule_reminder(state, title="Overdue", delay_seconds=1)
    schedule_reminder(state, title="Future", delay_seconds=3600)
    state.scheduler.shutdown()

    timers.set_time(timers.now() + 60_000)
    restarted = create_initial_state(settings=settings, listeners=[listener], timers=timers, clock=timers.now)

    assert listener.titles == ["Overdue"]
    assert [r.payload["title"] for r in list_reminders(restarted)] == ["Future"]

    timers.advance(3600 * 1000)
    assert listener.titles == ["Overdue", "Future"]
    assert list_reminders(restarted) == []


def test_recurring_chain_survives_restart(settings) -> None:
    timers = FakeTimers()
    listener = RecordingListener()

    state = create_initial_state(settings=settings, listeners=[listener], timers=timers, clock=timers.now)
    schedule_reminder(state, title="Weigh-in", delay_seconds=10, interval="weekly", times=3)
    timers.advance(10_000)
    state.scheduler.shutdown()

    restarted = create_initial_state(settings=settings, listeners=[listener], timers=timers, clock=timers.now)
    pending = list_reminders(restarted)
    assert len(pending) == 1
    assert pending[0].recurring is not None
    assert pending[0].recurring.remaining == 2


def test_console_renderer_formats_event(settings) -> None:
    lines: list[str] = []
    renderer = ConsoleRenderer(write=lines.append)
    timers = FakeTimers()

    state = create_initial_state(settings=settings, listeners=[renderer], timers=timers, clock=timers.now)
    schedule_reminder(state, title="Breathe", message="4-7-8", delay_seconds=0)
    timers.advance(0)

    assert renderer.shown == 1
    assert lines[0].endswith("(SYSTEM) Breathe - 4-7-8")


def test_memory_backend_starts_empty_each_time(settings) -> None:
    settings.storage_backend = "memory"
    timers = FakeTimers()

    state = create_initial_state(settings=settings, timers=timers, clock=timers.now)
    schedule_reminder(state, title="Gone", delay_seconds=60)
    state.scheduler.shutdown()

    assert list_reminders(create_initial_state(settings=settings, timers=timers, clock=timers.now)) == []


def test_settings_dataclass_is_accepted(monkeypatch, tmp_path) -> None:
    from flow_notify.config import Settings

    monkeypatch.setenv("FLOW_DATA_DIR", str(tmp_path / "d"))
    monkeypatch.setenv("FLOW_STORAGE_BACKEND", "memory")
    s = dc_replace(Settings.from_env(), max_scheduled=2)

    timers = FakeTimers()
    state = create_initial_state(settings=s, timers=timers, clock=timers.now)
    for i in range(3):
        schedule_reminder(state, title=f"t{i}", delay_seconds=60)
    assert [r.payload["title"] for r in list_reminders(state)] == ["t1", "t2"]
