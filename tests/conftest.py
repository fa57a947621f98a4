"""Pytest configuration and fixtures for dashboard sync tests."""

import json
from unittest.mock import MagicMock

import pytest

from dashboard import DashboardSyncEngine


class FakeWebSocketApp:
    """Stands in for websocket.WebSocketApp; tests drive its callbacks directly."""

    def __init__(self, url, on_open=None, on_message=None, on_error=None, on_close=None):
        self.url = url
        self.on_open = on_open
        self.on_message = on_message
        self.on_error = on_error
        self.on_close = on_close
        self.sent = []
        self.closed = False

    def run_forever(self):
        pass

    def send(self, data):
        self.sent.append(data)

    def close(self):
        self.closed = True

    def open(self):
        self.on_open(self)

    def receive(self, message):
        if isinstance(message, dict):
            message = json.dumps(message)
        self.on_message(self, message)

    def sent_json(self):
        return [json.loads(frame) for frame in self.sent]


class FakeTimer:
    def __init__(self, delay, function):
        self.delay = delay
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class SocketHarness:
    """Collects fake sockets, timers and socket loops created by a ConnectionManager."""

    def __init__(self):
        self.apps = []
        self.timers = []
        self.loops = []

    def app_factory(self, url, **callbacks):
        app = FakeWebSocketApp(url, **callbacks)
        self.apps.append(app)
        return app

    def timer_factory(self, delay, function):
        timer = FakeTimer(delay, function)
        self.timers.append(timer)
        return timer

    def runner(self, target):
        self.loops.append(target)

    @property
    def app(self):
        return self.apps[-1]

    def close(self):
        """Let the oldest socket loop finish, as when the server drops the connection"""
        self.loops.pop(0)()

    def options(self):
        return {
            "app_factory": self.app_factory,
            "timer_factory": self.timer_factory,
            "runner": self.runner,
        }


@pytest.fixture
def harness():
    return SocketHarness()


@pytest.fixture
def bus():
    """Event bus double recording emitted events."""
    return MagicMock()


@pytest.fixture
def downloads():
    return []


@pytest.fixture
def engine(harness, bus, downloads):
    return DashboardSyncEngine(
        url="ws://localhost:3000/ws/client",
        reconnect_delay=3.0,
        client_name="Dashboard",
        activity_limit=100,
        materializer=lambda data, path: downloads.append((data, path)),
        bus=bus,
        **harness.options()
    )


@pytest.fixture
def connected_engine(engine, harness):
    """Engine with an open connection and the handshake frames cleared."""
    engine.start()
    harness.app.open()
    harness.app.sent.clear()
    return engine


def file_meta(path, version=1, is_deleted=False, last_modified_by=None, modified=1700000000):
    meta = {
        "path": path,
        "size": 10,
        "modified": modified,
        "version": version,
        "hash": f"hash-{path}-{version}",
        "is_deleted": is_deleted,
    }
    if last_modified_by is not None:
        meta["last_modified_by"] = last_modified_by
    return meta
