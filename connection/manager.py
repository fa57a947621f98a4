"""
Connection manager owning the dashboard's WebSocket lifecycle
"""

import threading
from enum import Enum
from typing import Callable, Optional, Union

import websocket

from core.logging_config import get_logger
from events import event_bus, EventTypes


class ConnectionState(Enum):
    """Connection states"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


def _run_in_daemon_thread(target: Callable[[], None]):
    threading.Thread(target=target, daemon=True, name="DashboardWSThread").start()


class ConnectionManager:
    """
    Owns the single WebSocket connection.

    Cycles DISCONNECTED -> CONNECTING -> OPEN -> DISCONNECTED forever: every
    close or failed attempt fires on_close once and schedules a new attempt
    after a fixed delay, until stop() is called.
    """

    def __init__(self,
                 url: str,
                 reconnect_delay: float = 3.0,
                 on_open: Optional[Callable[[], None]] = None,
                 on_close: Optional[Callable[[], None]] = None,
                 on_text: Optional[Callable[[str], None]] = None,
                 on_binary: Optional[Callable[[bytes], None]] = None,
                 app_factory: Callable = websocket.WebSocketApp,
                 timer_factory: Callable = threading.Timer,
                 runner: Callable[[Callable[[], None]], None] = _run_in_daemon_thread,
                 bus=None):
        """
        Initialize connection manager

        Args:
            url: WebSocket endpoint
            reconnect_delay: Seconds to wait before reconnecting after a close
            on_open: Called when the connection opens
            on_close: Called once when a connection closes or an attempt fails
            on_text: Called with each inbound text frame
            on_binary: Called with each inbound binary frame
            app_factory: Builds the WebSocketApp (replaceable in tests)
            timer_factory: Builds the reconnect timer (replaceable in tests)
            runner: Runs the blocking socket loop, by default on a daemon thread
            bus: Event bus for telemetry, defaults to the global bus
        """
        self.logger = get_logger(__name__)
        self.url = url
        self.reconnect_delay = reconnect_delay
        self.on_open = on_open
        self.on_close = on_close
        self.on_text = on_text
        self.on_binary = on_binary
        self.app_factory = app_factory
        self.timer_factory = timer_factory
        self.runner = runner
        self.bus = bus or event_bus

        self.state = ConnectionState.DISCONNECTED
        self.state_lock = threading.RLock()
        self.ws = None
        self._reconnect_timer = None
        self._stopped = False

        # Stats
        self.connect_attempts = 0
        self.messages_sent = 0
        self.messages_received = 0

    def is_open(self) -> bool:
        with self.state_lock:
            return self.state == ConnectionState.OPEN

    def connect(self):
        """
        Open a new connection to the endpoint.

        Does nothing while a connection is already connecting or open, so a
        repeated call or a late reconnect timer never replaces a live socket.
        """
        with self.state_lock:
            if self._stopped:
                return
            if self.state != ConnectionState.DISCONNECTED:
                self.logger.debug(f"Connection already {self.state.value}, not reconnecting")
                return

            timer = self._reconnect_timer
            self._reconnect_timer = None
            if timer is not None:
                timer.cancel()

            self.state = ConnectionState.CONNECTING
            self.connect_attempts += 1

            ws = self.app_factory(
                self.url,
                on_open=self._on_open,
                on_message=self._on_message,
                on_error=self._on_error,
                on_close=self._on_close
            )
            self.ws = ws

        self.logger.info(f"Connecting to {self.url}", extra={
            "extra_data": {"url": self.url, "attempt": self.connect_attempts}
        })
        self.runner(lambda: self._run(ws))

    def _run(self, ws):
        """Run the socket until it closes, then handle the disconnect"""
        try:
            ws.run_forever()
        except Exception as e:
            self.logger.error(f"WebSocket loop crashed: {e}", exc_info=True)
        finally:
            self._handle_disconnect(ws)

    def _on_open(self, ws):
        with self.state_lock:
            if ws is not self.ws:
                self.logger.warning("Ignoring open event from a stale connection")
                return
            self.state = ConnectionState.OPEN

        self.logger.info("Connected to sync server")
        self.bus.emit(EventTypes.CONNECTION_OPENED, {"url": self.url}, source="connection")

        if self.on_open:
            self.on_open()

    def _on_message(self, ws, message: Union[str, bytes]):
        if ws is not self.ws:
            return
        self.messages_received += 1

        if isinstance(message, (bytes, bytearray)):
            if self.on_binary:
                self.on_binary(bytes(message))
        elif self.on_text:
            self.on_text(message)

    def _on_error(self, ws, error):
        self.logger.warning(f"WebSocket error: {error}")

    def _on_close(self, ws, close_status_code, close_msg):
        self.logger.info(f"Connection closed (Code: {close_status_code}, Message: {close_msg})")

    def _handle_disconnect(self, ws):
        with self.state_lock:
            if ws is not self.ws:
                return
            self.state = ConnectionState.DISCONNECTED
            self.ws = None
            stopped = self._stopped

        self.bus.emit(EventTypes.CONNECTION_LOST, {"url": self.url}, source="connection")

        if self.on_close:
            try:
                self.on_close()
            except Exception as e:
                self.logger.error(f"Error in close callback: {e}", exc_info=True)

        if not stopped:
            self._schedule_reconnect()

    def _schedule_reconnect(self):
        with self.state_lock:
            if self._stopped:
                return
            timer = self.timer_factory(self.reconnect_delay, self.connect)
            timer.daemon = True
            self._reconnect_timer = timer

        self.logger.info(f"Reconnecting in {self.reconnect_delay:.1f}s")
        self.bus.emit(EventTypes.CONNECTION_RECONNECT_SCHEDULED,
                      {"delay": self.reconnect_delay}, source="connection")
        timer.start()

    def send(self, text: str) -> bool:
        """
        Send a text frame if the connection is open.

        Returns:
            True if the frame was handed to the socket; otherwise it is dropped
        """
        with self.state_lock:
            ws_ref = self.ws if self.state == ConnectionState.OPEN else None

        if ws_ref is None:
            self.logger.debug(f"Not connected, dropping message: {text}")
            self.bus.emit(EventTypes.COMMAND_DROPPED, {"message": text}, source="connection")
            return False

        try:
            ws_ref.send(text)
        except (websocket.WebSocketConnectionClosedException, OSError) as e:
            self.logger.warning(f"Send failed, dropping message: {e}")
            self.bus.emit(EventTypes.COMMAND_DROPPED, {"message": text, "error": str(e)},
                          source="connection")
            return False

        self.messages_sent += 1
        self.bus.emit(EventTypes.COMMAND_SENT, {"message": text}, source="connection")
        return True

    def stop(self):
        """Close the connection and stop reconnecting"""
        with self.state_lock:
            self._stopped = True
            timer = self._reconnect_timer
            self._reconnect_timer = None
            ws_to_close = self.ws

        if timer:
            timer.cancel()

        if ws_to_close:
            try:
                ws_to_close.close()
            except Exception as e:
                self.logger.warning(f"Error closing WebSocket: {e}")

    def get_stats(self):
        """Get connection statistics"""
        return {
            "state": self.state.value,
            "url": self.url,
            "connect_attempts": self.connect_attempts,
            "messages_sent": self.messages_sent,
            "messages_received": self.messages_received
        }
