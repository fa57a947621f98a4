"""
State store holding the dashboard's local view of the server
"""

import threading
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from core.logging_config import get_logger
from protocol.messages import (
    ActivityEntry, ActivityType, FileMetadata, Stats, StorageInfo
)
from .observable import Observable

DEFAULT_ACTIVITY_LIMIT = 100


class StateStore:
    """
    Observable containers for storages, the active storage, its files, the
    activity feed, stats and the connection flag.

    Every container holds immutable snapshots: lists are rebuilt on each
    change, so observers never see a half-applied update.
    """

    def __init__(self, activity_limit: int = DEFAULT_ACTIVITY_LIMIT):
        self.logger = get_logger(__name__)
        self.activity_limit = activity_limit
        self._lock = threading.RLock()

        self.storages = Observable([], "storages", self._lock)
        self.active_storage_id = Observable(None, "active_storage_id", self._lock)
        self.files = Observable([], "files", self._lock)
        self.activity = Observable([], "activity", self._lock)
        self.stats = Observable(Stats(), "stats", self._lock)
        self.is_connected = Observable(False, "is_connected", self._lock)

    # Connection

    def set_connected(self, connected: bool):
        self.is_connected.set(connected)

    def connected(self) -> bool:
        return self.is_connected.get()

    # Storages

    def replace_storages(self, storages: List[StorageInfo]):
        self.storages.set(list(storages))

    def set_active_storage(self, storage_id: Optional[str]):
        self.active_storage_id.set(storage_id)

    def remove_storage(self, storage_id: str) -> bool:
        """
        Drop a storage from the local list.

        If it was the active storage, the selection and file list are cleared.

        Returns:
            True if the removed storage was the active one
        """
        with self._lock:
            self.storages.update(lambda current: [s for s in current if s.id != storage_id])
            was_active = self.active_storage_id.get() == storage_id
            if was_active:
                self.active_storage_id.set(None)
                self.files.set([])
        return was_active

    # Files

    def load_snapshot(self, files: List[FileMetadata]):
        """Replace the file list with a snapshot, dropping deleted entries"""
        self.files.set([f for f in files if not f.is_deleted])

    def upsert_file(self, meta: FileMetadata):
        """Replace the entry with the same path in place, or append it"""
        def apply(current):
            updated = list(current)
            for index, existing in enumerate(updated):
                if existing.path == meta.path:
                    updated[index] = meta
                    return updated
            updated.append(meta)
            return updated

        self.files.update(apply)

    def mark_deleted(self, path: str) -> bool:
        """
        Tombstone the entry for path without removing it.

        Returns:
            True if an entry was found
        """
        found = []

        def apply(current):
            updated = []
            for existing in current:
                if existing.path == path:
                    found.append(existing)
                    existing = replace(existing, is_deleted=True)
                updated.append(existing)
            return updated

        self.files.update(apply)
        return bool(found)

    def clear_files(self):
        self.files.set([])

    def get_file(self, path: str) -> Optional[FileMetadata]:
        for meta in self.files.get():
            if meta.path == path:
                return meta
        return None

    # Activity

    def add_activity(self, activity_type: ActivityType, message: str,
                     user: str = "System", timestamp: Optional[float] = None) -> ActivityEntry:
        """Append an entry to the feed, evicting the oldest past the limit"""
        entry = ActivityEntry.create(activity_type, message, user, timestamp)
        self.activity.update(lambda current: (current + [entry])[-self.activity_limit:])
        self.logger.debug(f"Activity [{activity_type.value}] {user}: {message}")
        return entry

    # Stats

    def set_stats(self, stats: Stats):
        self.stats.set(stats)

    def subscribe(self, container: str, listener: Callable[[Any, Any], None]) -> Callable[[], None]:
        """Subscribe to one container by name"""
        observable = getattr(self, container, None)
        if not isinstance(observable, Observable):
            raise ValueError(f"Unknown state container: {container}")
        return observable.subscribe(listener)

    def snapshot(self) -> Dict[str, Any]:
        """Get the current value of every container"""
        with self._lock:
            return {
                "is_connected": self.is_connected.get(),
                "storages": self.storages.get(),
                "active_storage_id": self.active_storage_id.get(),
                "files": self.files.get(),
                "activity": self.activity.get(),
                "stats": self.stats.get()
            }
