"""
Observable value containers for the dashboard state
"""

import threading
from typing import Any, Callable, List

from core.logging_config import get_logger

logger = get_logger(__name__)


class Observable:
    """
    Holds one value and notifies listeners whenever it is replaced.

    Values are never mutated in place: every update stores a new object, so a
    listener always receives a fully applied value. Listeners are called
    outside the lock with (old_value, new_value).
    """

    def __init__(self, initial: Any, name: str = "", lock: threading.RLock = None):
        self.name = name
        self._value = initial
        self._lock = lock or threading.RLock()
        self._listeners: List[Callable[[Any, Any], None]] = []

    def get(self) -> Any:
        """Get current value"""
        with self._lock:
            return self._value

    def set(self, value: Any) -> None:
        """Replace the value"""
        with self._lock:
            old_value = self._value
            self._value = value
        self._notify_listeners(old_value, value)

    def update(self, fn: Callable[[Any], Any]) -> Any:
        """Replace the value with fn(current) atomically and return the new value"""
        with self._lock:
            old_value = self._value
            new_value = fn(old_value)
            self._value = new_value
        self._notify_listeners(old_value, new_value)
        return new_value

    def subscribe(self, listener: Callable[[Any, Any], None]) -> Callable[[], None]:
        """Add a change listener; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify_listeners(self, old_value: Any, new_value: Any):
        for listener in list(self._listeners):
            try:
                listener(old_value, new_value)
            except Exception as e:
                logger.error(f"Error in {self.name or 'state'} listener: {e}", exc_info=True)
