# tests/test_dispatch.py

from __future__ import annotations

from flow_notify.notifications.dispatch import NotificationDispatcher, NotificationEvent

from .fakes import RecordingListener


def test_event_to_notification_shape() -> None:
    event = NotificationEvent.create(
        schedule_id="s1",
        payload={"title": "Hydrate", "message": "250ml"},
        fired_at_ms=1_700_000_000_000,
    )
    n = event.to_notification()

    assert n["id"] == event.delivery_id
    assert n["id"] != "s1"
    assert n["time"] == event.fired_at
    assert len(event.fired_at) == 5 and event.fired_at[2] == ":"
    assert n["title"] == "Hydrate"
    assert n["message"] == "250ml"
    assert n["type"] == "SYSTEM"
    assert n["read"] is False


def test_each_fire_gets_a_fresh_delivery_id() -> None:
    a = NotificationEvent.create(schedule_id="s1", payload={"title": "x"}, fired_at_ms=0)
    b = NotificationEvent.create(schedule_id="s1", payload={"title": "x"}, fired_at_ms=0)
    assert a.delivery_id != b.delivery_id


def test_publish_and_unsubscribe() -> None:
    dispatcher = NotificationDispatcher()
    first = RecordingListener()
    second = RecordingListener()
    unsubscribe = dispatcher.subscribe(first)
    dispatcher.subscribe(second)

    event = NotificationEvent.create(schedule_id="s1", payload={"title": "x"}, fired_at_ms=0)
    assert dispatcher.publish(event) == 2

    unsubscribe()
    unsubscribe()
    assert dispatcher.listener_count == 1
    assert dispatcher.publish(event) == 1

    assert len(first.events) == 1
    assert len(second.events) == 2


def test_publish_isolates_listener_errors(caplog) -> None:
    dispatcher = NotificationDispatcher()
    recorder = RecordingListener()

    def _boom(event) -> None:
        raise RuntimeError("nope")

    dispatcher.subscribe(_boom)
    dispatcher.subscribe(recorder)

    event = NotificationEvent.create(schedule_id="s1", payload={"title": "x"}, fired_at_ms=0)
    assert dispatcher.publish(event) == 1
    assert recorder.events == [event]
    assert "Notification listener failed" in caplog.text


def test_unsubscribe_removes_its_own_listener_when_others_compare_equal() -> None:
    dispatcher = NotificationDispatcher()
    first = RecordingListener()
    second = RecordingListener()
    assert first == second

    dispatcher.subscribe(first)
    unsubscribe_second = dispatcher.subscribe(second)
    unsubscribe_second()
    unsubscribe_second()

    event = NotificationEvent.create(schedule_id="s1", payload={"title": "x"}, fired_at_ms=0)
    assert dispatcher.publish(event) == 1
    assert first.events == [event]
    assert second.events == []
