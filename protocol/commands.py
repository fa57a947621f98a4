"""
Outbound command encoding for UI intents
"""

from core.logging_config import get_logger
from .codec import encode_command
from .messages import Command


class CommandEncoder:
    """Turns dashboard intents into wire commands and applies their local side effects"""

    def __init__(self, connection, store, client_name: str = "Dashboard"):
        """
        Args:
            connection: Object exposing send(text) -> bool
            store: StateStore receiving optimistic local edits
            client_name: Name announced when joining a storage
        """
        self.logger = get_logger(__name__)
        self.connection = connection
        self.store = store
        self.client_name = client_name

    def _send(self, name: str, payload=None) -> bool:
        return self.connection.send(encode_command(name, payload))

    def register_dashboard(self) -> bool:
        return self._send(Command.REGISTER_DASHBOARD)

    def request_storage_list(self) -> bool:
        return self._send(Command.REQUEST_STORAGE_LIST)

    def request_file(self, path: str) -> bool:
        return self._send(Command.REQUEST_FILE, {"path": path})

    def create_storage(self, name: str) -> bool:
        return self._send(Command.CREATE_STORAGE, {"name": name})

    def join_storage(self, storage_id: str) -> bool:
        """Select a storage and ask the server for its snapshot"""
        self.store.set_active_storage(storage_id)
        self.store.clear_files()
        return self._send(Command.JOIN_STORAGE, {
            "storage_id": storage_id,
            "client_name": self.client_name
        })

    def delete_storage(self, storage_id: str) -> bool:
        """Remove the storage locally without waiting for the server"""
        if self.store.remove_storage(storage_id):
            self.logger.info(f"Deleted the active storage {storage_id}, selection cleared")
        return self._send(Command.DELETE_STORAGE, {"storage_id": storage_id})

    def delete_file(self, path: str) -> bool:
        """Tombstone the file locally and tell the server; no-op while disconnected"""
        if not self.store.connected():
            self.logger.debug(f"Not connected, ignoring delete of {path}")
            return False
        self.store.mark_deleted(path)
        return self._send(Command.DELETE_FILE, {"path": path})
