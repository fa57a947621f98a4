"""
Telemetry bus for the sync engine.

Components emit events for connection changes, commands sent or dropped,
rejected frames and download progress. Listeners run on a single background
thread, so a slow listener never holds up the socket thread.
"""

import threading
import time
from collections import Counter, defaultdict
from queue import Queue, Empty
from typing import Dict, Any, List, Callable, Optional

from core.logging_config import get_logger

logger = get_logger(__name__)

WILDCARD = "*"


class SystemEvent:
    """One telemetry event"""

    def __init__(self, event_type: str, data: Dict[str, Any], source: Optional[str] = None):
        self.type = event_type
        self.data = data
        self.source = source or "engine"
        self.timestamp = time.time()

    def __repr__(self):
        return f"SystemEvent({self.type!r}, source={self.source!r}, data={self.data!r})"


class EventBus:
    """Queues emitted events and delivers them to listeners on a background thread"""

    def __init__(self):
        self.listeners: Dict[str, List[Callable[[SystemEvent], None]]] = defaultdict(list)
        self.event_queue = Queue()
        self.event_counts = Counter()
        self.listener_errors = 0
        self._running = True
        self._processor_thread = threading.Thread(
            target=self._process_events, daemon=True, name="SyncEventBus"
        )
        self._processor_thread.start()

    def emit(self, event_type: str, data: Dict[str, Any], source: Optional[str] = None):
        self.event_queue.put(SystemEvent(event_type, data, source))

    def on(self, event_type: str, callback: Callable[[SystemEvent], None]):
        """Register a listener for one event type, or WILDCARD for all of them"""
        self.listeners[event_type].append(callback)

    def on_all(self, callback: Callable[[SystemEvent], None]):
        self.on(WILDCARD, callback)

    def off(self, event_type: str, callback: Callable[[SystemEvent], None]):
        if callback in self.listeners.get(event_type, []):
            self.listeners[event_type].remove(callback)

    def _process_events(self):
        while self._running:
            try:
                event = self.event_queue.get(timeout=0.1)
            except Empty:
                continue

            self.event_counts[event.type] += 1
            targets = self.listeners.get(event.type, []) + self.listeners.get(WILDCARD, [])
            for listener in targets:
                try:
                    listener(event)
                except Exception as e:
                    self.listener_errors += 1
                    logger.error(f"Error in event listener for {event.type}: {e}", exc_info=True)

    def get_stats(self) -> Dict[str, Any]:
        """Per-type counts of delivered events"""
        return {
            "total_events": sum(self.event_counts.values()),
            "event_counts": dict(self.event_counts),
            "queue_size": self.event_queue.qsize(),
            "listener_errors": self.listener_errors
        }

    def shutdown(self):
        """Stop delivering events"""
        self._running = False
        if self._processor_thread.is_alive():
            self._processor_thread.join(timeout=2.0)


# Global event bus instance
event_bus = EventBus()


# Event type constants
class EventTypes:
    # Connection events
    CONNECTION_OPENED = "connection.opened"
    CONNECTION_LOST = "connection.lost"
    CONNECTION_RECONNECT_SCHEDULED = "connection.reconnect_scheduled"

    # Command events
    COMMAND_SENT = "command.sent"
    COMMAND_DROPPED = "command.dropped"

    # Inbound message events
    MESSAGE_REJECTED = "message.rejected"

    # Download events
    DOWNLOAD_REQUESTED = "download.requested"
    DOWNLOAD_STARTED = "download.started"
    DOWNLOAD_COMPLETE = "download.complete"
    DOWNLOAD_FAILED = "download.failed"
    DOWNLOAD_DISCARDED = "download.discarded"
