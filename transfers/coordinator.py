"""
Pairs download announcements with the binary frames that follow them
"""

import threading
from typing import Callable, Optional, Set

from core.logging_config import get_logger
from events import event_bus, EventTypes

Materializer = Callable[[bytes, str], None]


class BinaryTransferCoordinator:
    """
    Tracks requested downloads and the single armed transfer.

    Binary frames carry no name: the next frame after a StartTransfer for a
    pending path belongs to that path. A second announcement before the frame
    arrives overwrites the armed slot and leaves the first path pending.
    Pending paths never expire.
    """

    def __init__(self, store, encoder, materializer: Optional[Materializer] = None, bus=None):
        """
        Args:
            store: StateStore, consulted for the connection flag
            encoder: CommandEncoder used to send RequestFile
            materializer: Called with (data, path) for each completed download
            bus: Event bus for telemetry, defaults to the global bus
        """
        self.logger = get_logger(__name__)
        self.store = store
        self.encoder = encoder
        self.materializer = materializer
        self.bus = bus or event_bus

        self._lock = threading.Lock()
        self._pending: Set[str] = set()
        self._armed: Optional[str] = None

    @property
    def pending(self) -> Set[str]:
        """Copy of the paths requested but not yet received"""
        with self._lock:
            return set(self._pending)

    @property
    def armed_path(self) -> Optional[str]:
        with self._lock:
            return self._armed

    def request_download(self, path: str) -> bool:
        """
        Ask the server for a file.

        Returns:
            False when disconnected (nothing is recorded), True otherwise
        """
        if not self.store.connected():
            self.logger.debug(f"Not connected, ignoring download request for {path}")
            return False

        with self._lock:
            self._pending.add(path)

        self.bus.emit(EventTypes.DOWNLOAD_REQUESTED, {"path": path}, source="transfers")
        self.encoder.request_file(path)
        return True

    def on_start_transfer(self, path: str) -> bool:
        """
        Handle a StartTransfer announcement.

        Returns:
            True if the transfer was ours and the slot is now armed
        """
        with self._lock:
            if path not in self._pending:
                self._armed = None
                return False

            if self._armed is not None and self._armed != path:
                self.logger.warning(f"Transfer of {self._armed} superseded by {path} before its data arrived")
            self._armed = path

        self.bus.emit(EventTypes.DOWNLOAD_STARTED, {"path": path}, source="transfers")
        return True

    def on_binary(self, data: bytes) -> bool:
        """
        Deliver a binary frame to the armed transfer.

        Returns:
            True if the frame completed a download, False if it was discarded
        """
        with self._lock:
            path = self._armed
            if path is None:
                discarded = True
            else:
                discarded = False
                self._pending.discard(path)
                self._armed = None

        if discarded:
            self.logger.debug(f"Discarding {len(data)} byte binary frame with no armed transfer")
            self.bus.emit(EventTypes.DOWNLOAD_DISCARDED, {"size": len(data)}, source="transfers")
            return False

        self.logger.info(f"Received {path} ({len(data)} bytes)")
        try:
            if self.materializer:
                self.materializer(data, path)
        except Exception as e:
            self.logger.error(f"Failed to save download {path}: {e}", exc_info=True)
            self.bus.emit(EventTypes.DOWNLOAD_FAILED, {"path": path, "error": str(e)}, source="transfers")
        else:
            self.bus.emit(EventTypes.DOWNLOAD_COMPLETE, {"path": path, "size": len(data)}, source="transfers")
        return True
