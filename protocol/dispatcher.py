"""
Routes decoded inbound messages to state mutations and the transfer coordinator
"""

from core.logging_config import get_logger
from events import event_bus, EventTypes
from .codec import decode_frame
from .exceptions import MessageDecodeError, AmbiguousEnvelopeError
from .messages import (
    ActivityType,
    StorageListMessage, WelcomeMessage, StartTransferMessage, LogMessage,
    StatsMessage, FileUpdateMessage, DeleteFileMessage,
)

# Server log lines containing this are duplicates of FileUpdate activity
SUPPRESSED_LOG_FRAGMENT = "File updated in"


class MessageDispatcher:
    """Decodes text frames and applies their effects; hands binary frames to transfers"""

    def __init__(self, store, transfers, bus=None):
        self.logger = get_logger(__name__)
        self.store = store
        self.transfers = transfers
        self.bus = bus or event_bus

        self.handlers = {
            StorageListMessage: self._handle_storage_list,
            WelcomeMessage: self._handle_welcome,
            StartTransferMessage: self._handle_start_transfer,
            LogMessage: self._handle_log,
            StatsMessage: self._handle_stats,
            FileUpdateMessage: self._handle_file_update,
            DeleteFileMessage: self._handle_delete_file,
        }

        self.messages_handled = 0
        self.messages_rejected = 0

    def dispatch_text(self, text: str) -> bool:
        """
        Decode and apply one text frame.

        Malformed frames are logged and dropped without touching state.

        Returns:
            True if a recognized message was applied
        """
        try:
            message = decode_frame(text)
        except AmbiguousEnvelopeError as e:
            self._reject(f"Rejected envelope: {e}", text)
            return False
        except MessageDecodeError as e:
            self._reject(f"Failed to parse message: {e}", text)
            return False

        if message is None:
            self.logger.debug(f"Ignoring unrecognized frame: {text[:200]}")
            return False

        handler = self.handlers.get(type(message))
        if handler is None:
            raise TypeError(f"No handler registered for {type(message).__name__}")

        handler(message)
        self.messages_handled += 1
        return True

    def dispatch_binary(self, data: bytes) -> bool:
        return self.transfers.on_binary(data)

    def _reject(self, reason: str, text: str):
        self.messages_rejected += 1
        self.logger.warning(reason, extra={"extra_data": {"raw": text[:500]}})
        self.bus.emit(EventTypes.MESSAGE_REJECTED, {"reason": reason}, source="dispatcher")

    def _handle_storage_list(self, message: StorageListMessage):
        self.store.replace_storages(message.storages)

    def _handle_welcome(self, message: WelcomeMessage):
        self.store.load_snapshot(message.files)
        self.store.add_activity(
            ActivityType.SYSTEM,
            f"Joined storage: {message.storage_id[:8]}...",
            "System"
        )

    def _handle_start_transfer(self, message: StartTransferMessage):
        if self.transfers.on_start_transfer(message.path):
            self.store.add_activity(ActivityType.SYSTEM, f"Downloading {message.path}...", "System")

    def _handle_log(self, message: LogMessage):
        if SUPPRESSED_LOG_FRAGMENT in message.message:
            return
        activity_type = ActivityType.ERROR if message.level == "error" else ActivityType.SYSTEM
        self.store.add_activity(activity_type, message.message, "Server", message.timestamp)

    def _handle_stats(self, message: StatsMessage):
        self.store.set_stats(message.stats)

    def _handle_file_update(self, message: FileUpdateMessage):
        meta = message.meta
        self.store.upsert_file(meta)
        self.store.add_activity(
            ActivityType.FILE_UPDATE,
            meta.path,
            meta.last_modified_by or "Unknown",
            meta.modified
        )

    def _handle_delete_file(self, message: DeleteFileMessage):
        self.store.mark_deleted(message.path)
        self.store.add_activity(ActivityType.FILE_DELETE, message.path, "Unknown")
