"""Tests for the WebSocket connection manager."""

from unittest.mock import MagicMock

import pytest
import websocket

from connection import ConnectionManager, ConnectionState


@pytest.fixture
def callbacks():
    return MagicMock()


@pytest.fixture
def manager(harness, callbacks, bus):
    return ConnectionManager(
        "ws://localhost:3000/ws/client",
        reconnect_delay=3.0,
        on_open=callbacks.on_open,
        on_close=callbacks.on_close,
        on_text=callbacks.on_text,
        on_binary=callbacks.on_binary,
        bus=bus,
        **harness.options()
    )


def test_connect_creates_socket_for_endpoint(manager, harness):
    manager.connect()

    assert len(harness.apps) == 1
    assert harness.app.url == "ws://localhost:3000/ws/client"
    assert manager.state == ConnectionState.CONNECTING
    assert manager.connect_attempts == 1


def test_open_fires_callback(manager, harness, callbacks):
    manager.connect()
    harness.app.open()

    assert manager.state == ConnectionState.OPEN
    assert manager.is_open()
    callbacks.on_open.assert_called_once_with()


def test_send_only_when_open(manager, harness):
    assert manager.send('"RegisterDashboard"') is False

    manager.connect()
    assert manager.send('"RegisterDashboard"') is False
    assert harness.app.sent == []

    harness.app.open()
    assert manager.send('"RegisterDashboard"') is True
    assert harness.app.sent == ['"RegisterDashboard"']


def test_send_on_closed_socket_is_dropped(manager, harness):
    manager.connect()
    harness.app.open()
    harness.app.send = MagicMock(side_effect=websocket.WebSocketConnectionClosedException("gone"))

    assert manager.send('"RequestStorageList"') is False
    assert manager.messages_sent == 0


def test_frames_are_routed_by_kind(manager, harness, callbacks):
    manager.connect()
    harness.app.open()

    harness.app.receive('{"Log": {"message": "hi"}}')
    harness.app.receive(b"\x00\x01")

    callbacks.on_text.assert_called_once_with('{"Log": {"message": "hi"}}')
    callbacks.on_binary.assert_called_once_with(b"\x00\x01")
    assert manager.messages_received == 2


def test_close_schedules_reconnect_after_fixed_delay(manager, harness, callbacks):
    manager.connect()
    harness.app.open()

    harness.close()

    assert manager.state == ConnectionState.DISCONNECTED
    callbacks.on_close.assert_called_once_with()
    assert len(harness.timers) == 1
    timer = harness.timers[0]
    assert timer.delay == 3.0
    assert timer.started
    assert timer.daemon
    # no new attempt until the timer fires
    assert len(harness.apps) == 1

    timer.fire()

    assert len(harness.apps) == 2
    assert manager.state == ConnectionState.CONNECTING


def test_failed_attempts_retry_indefinitely_without_backoff(manager, harness, callbacks):
    manager.connect()
    for _ in range(5):
        harness.close()
        harness.timers[-1].fire()

    assert [t.delay for t in harness.timers] == [3.0] * 5
    assert len(harness.apps) == 6
    assert callbacks.on_close.call_count == 5
    callbacks.on_open.assert_not_called()


def test_stale_socket_events_are_ignored(manager, harness, callbacks):
    manager.connect()
    stale = harness.app
    harness.close()
    harness.timers[-1].fire()

    stale.open()
    stale.receive("{}")

    callbacks.on_open.assert_not_called()
    callbacks.on_text.assert_not_called()
    assert manager.state == ConnectionState.CONNECTING


def test_stop_cancels_pending_reconnect(manager, harness):
    manager.connect()
    harness.close()
    timer = harness.timers[0]

    manager.stop()

    assert timer.cancelled
    timer.fire()
    assert len(harness.apps) == 1


def test_stop_closes_socket_without_reconnecting(manager, harness, callbacks):
    manager.connect()
    harness.app.open()

    manager.stop()
    assert harness.app.closed

    harness.close()

    callbacks.on_close.assert_called_once_with()
    assert harness.timers == []


def test_crashing_loop_still_reconnects(manager, harness, callbacks):
    manager.connect()
    harness.app.run_forever = MagicMock(side_effect=RuntimeError("boom"))

    harness.close()

    callbacks.on_close.assert_called_once_with()
    assert len(harness.timers) == 1


def test_repeated_connect_keeps_live_socket(manager, harness, callbacks):
    manager.connect()
    first = harness.app
    first.open()

    manager.connect()

    assert harness.apps == [first]
    assert not first.closed
    assert manager.state == ConnectionState.OPEN
    assert manager.connect_attempts == 1


def test_connect_cancels_pending_reconnect(manager, harness, callbacks):
    manager.connect()
    harness.close()
    timer = harness.timers[0]

    manager.connect()
    harness.app.open()

    assert timer.cancelled
    # a timer callback already in flight finds the socket open
    timer.fire()

    assert len(harness.apps) == 2
    assert manager.state == ConnectionState.OPEN
    assert not harness.app.closed
    callbacks.on_close.assert_called_once_with()
