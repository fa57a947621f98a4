"""Tests for the event bus."""

import threading

import pytest

from events import EventBus, EventTypes


@pytest.fixture
def event_bus():
    bus = EventBus()
    yield bus
    bus.shutdown()


def test_listener_receives_event(event_bus):
    received = []
    done = threading.Event()

    def listener(event):
        received.append(event)
        done.set()

    event_bus.on(EventTypes.DOWNLOAD_COMPLETE, listener)
    event_bus.emit(EventTypes.DOWNLOAD_COMPLETE, {"path": "a.txt"}, source="transfers")

    assert done.wait(timeout=2.0)
    assert received[0].data == {"path": "a.txt"}
    assert received[0].source == "transfers"


def test_wildcard_listener_survives_failing_listener(event_bus):
    done = threading.Event()

    def broken(event):
        raise RuntimeError("boom")

    event_bus.on(EventTypes.CONNECTION_LOST, broken)
    event_bus.on_all(lambda event: done.set())
    event_bus.emit(EventTypes.CONNECTION_LOST, {})

    assert done.wait(timeout=2.0)
    assert event_bus.get_stats()["listener_errors"] == 1


def test_stats_count_delivered_events(event_bus):
    done = threading.Event()
    seen = []

    def listener(event):
        seen.append(event)
        if len(seen) == 5:
            done.set()

    event_bus.on_all(listener)
    for i in range(5):
        event_bus.emit(EventTypes.COMMAND_SENT, {"n": i})

    assert done.wait(timeout=2.0)
    stats = event_bus.get_stats()
    assert stats["event_counts"][EventTypes.COMMAND_SENT] == 5
    assert [e.data["n"] for e in seen] == [0, 1, 2, 3, 4]


def test_off_removes_listener(event_bus):
    calls = []
    done = threading.Event()

    def listener(event):
        calls.append(event)

    event_bus.on(EventTypes.COMMAND_DROPPED, listener)
    event_bus.off(EventTypes.COMMAND_DROPPED, listener)
    event_bus.on_all(lambda event: done.set())
    event_bus.emit(EventTypes.COMMAND_DROPPED, {})

    assert done.wait(timeout=2.0)
    assert calls == []
