"""
Dashboard sync engine wiring the connection, dispatcher, state and transfers
"""

from typing import Any, Dict, Optional

from config import SYNC_CONFIG
from connection import ConnectionManager
from core.logging_config import get_logger
from events import event_bus
from protocol.commands import CommandEncoder
from protocol.dispatcher import MessageDispatcher
from protocol.messages import ActivityType
from store import StateStore
from transfers import BinaryTransferCoordinator


class DashboardSyncEngine:
    """
    Keeps a StateStore in sync with the server and exposes the dashboard's
    commands. UI code reads state from `store` and calls the intent methods.
    """

    def __init__(self,
                 url: Optional[str] = None,
                 reconnect_delay: Optional[float] = None,
                 client_name: Optional[str] = None,
                 activity_limit: Optional[int] = None,
                 materializer=None,
                 bus=None,
                 **connection_options):
        """
        Args:
            url: WebSocket endpoint, defaults to SYNC_CONFIG["websocket_url"]
            reconnect_delay: Fixed reconnect delay in seconds
            client_name: Name sent with JoinStorage
            activity_limit: Maximum activity feed length
            materializer: Called with (data, path) for each completed download
            bus: Event bus for telemetry, defaults to the global bus
            **connection_options: Extra ConnectionManager arguments
                (app_factory, timer_factory, runner)
        """
        self.logger = get_logger(__name__)
        self.bus = bus or event_bus

        self.store = StateStore(
            activity_limit=activity_limit if activity_limit is not None else SYNC_CONFIG["activity_limit"]
        )
        self.connection = ConnectionManager(
            url or SYNC_CONFIG["websocket_url"],
            reconnect_delay=reconnect_delay if reconnect_delay is not None else SYNC_CONFIG["reconnect_delay"],
            on_open=self._handle_open,
            on_close=self._handle_close,
            on_text=self._handle_text,
            on_binary=self._handle_binary,
            bus=self.bus,
            **connection_options
        )
        self.commands = CommandEncoder(
            self.connection,
            self.store,
            client_name=client_name or SYNC_CONFIG["client_name"]
        )
        self.transfers = BinaryTransferCoordinator(self.store, self.commands, materializer, bus=self.bus)
        self.dispatcher = MessageDispatcher(self.store, self.transfers, bus=self.bus)

    def start(self):
        """Connect; reconnects continue until stop()"""
        self.logger.info("Starting dashboard sync engine")
        self.connection.connect()

    def stop(self):
        self.logger.info("Stopping dashboard sync engine")
        self.connection.stop()

    # Connection lifecycle

    def _handle_open(self):
        self.store.set_connected(True)
        self.store.add_activity(ActivityType.CONNECT, "Dashboard connected", "System")
        self.commands.register_dashboard()
        self.commands.request_storage_list()

    def _handle_close(self):
        self.store.set_connected(False)
        self.store.add_activity(ActivityType.ERROR, "Connection lost", "System")

    def _handle_text(self, text: str):
        self.dispatcher.dispatch_text(text)

    def _handle_binary(self, data: bytes):
        self.dispatcher.dispatch_binary(data)

    # Dashboard intents

    def download_file(self, path: str) -> bool:
        return self.transfers.request_download(path)

    def delete_file(self, path: str) -> bool:
        return self.commands.delete_file(path)

    def join_storage(self, storage_id: str) -> bool:
        return self.commands.join_storage(storage_id)

    def refresh_storages(self) -> bool:
        return self.commands.request_storage_list()

    def create_storage(self, name: str) -> bool:
        return self.commands.create_storage(name)

    def delete_storage(self, storage_id: str) -> bool:
        return self.commands.delete_storage(storage_id)

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        return {
            "connection": self.connection.get_stats(),
            "messages_handled": self.dispatcher.messages_handled,
            "messages_rejected": self.dispatcher.messages_rejected,
            "pending_downloads": sorted(self.transfers.pending),
            "armed_transfer": self.transfers.armed_path,
            "events": self.bus.get_stats()
        }
