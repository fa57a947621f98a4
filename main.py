#!/usr/bin/env python3
"""
Main application - runs the dashboard sync engine headless, logging activity
and saving requested downloads to disk
"""

import signal
import sys
import threading

from config import SYNC_CONFIG, LOGGING_CONFIG
from core.logging_config import setup_logging, get_logger
from core.config_validator import validate_startup_config, ConfigValidationError
from dashboard import DashboardSyncEngine
from events import event_bus, EventTypes
from transfers import DownloadWriter


class DashboardRunner:
    def __init__(self, download_dir=None, bus=None, **engine_options):
        self.logger = get_logger(__name__)
        self.bus = bus or event_bus
        self.writer = DownloadWriter(download_dir or SYNC_CONFIG["download_dir"])
        self.engine = DashboardSyncEngine(materializer=self.writer, bus=self.bus, **engine_options)
        self.stopped = threading.Event()

        self.engine.store.subscribe("activity", self._log_new_activity)
        self.engine.store.subscribe("stats", self._log_stats)
        self.bus.on(EventTypes.DOWNLOAD_COMPLETE, self._on_download_complete)
        self.bus.on(EventTypes.COMMAND_DROPPED, self._on_command_dropped)

    def _log_new_activity(self, old_entries, new_entries):
        seen = {entry.id for entry in old_entries}
        for entry in new_entries:
            if entry.id not in seen:
                self.logger.info(f"[{entry.type.value}] {entry.user}: {entry.message}")

    def _log_stats(self, old_stats, new_stats):
        self.logger.info(f"{new_stats.active_clients} active client(s), {new_stats.total_files} file(s)")

    def _on_download_complete(self, event):
        self.logger.info(f"Saved {event.data['path']} ({event.data['size']} bytes) to {self.writer.download_dir}")

    def _on_command_dropped(self, event):
        self.logger.warning(f"Offline, dropped command {event.data['message']}")

    def start(self):
        """Start syncing and block until stopped"""
        self.engine.start()
        self.stopped.wait()

    def stop(self):
        self.engine.stop()
        self.logger.info("Session summary", extra={"extra_data": self.engine.get_stats()})
        self.bus.shutdown()
        self.stopped.set()


def signal_handler(sig, frame):
    """Handle Ctrl+C gracefully"""
    global runner
    try:
        runner.logger.info("Shutting down gracefully...")
        runner.stop()
    finally:
        sys.exit(0)


if __name__ == "__main__":
    setup_logging(LOGGING_CONFIG)
    logger = get_logger(__name__)

    try:
        validate_startup_config()
    except ConfigValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        sys.exit(1)

    logger.info("Starting dashboard sync", extra={"extra_data": {"url": SYNC_CONFIG["websocket_url"]}})

    signal.signal(signal.SIGINT, signal_handler)

    runner = DashboardRunner()
    try:
        runner.start()
    except Exception as e:
        logger.error("Dashboard sync failed", exc_info=True, extra={
            "extra_data": {"error_type": type(e).__name__, "error_message": str(e)}
        })
        runner.stop()
        sys.exit(1)
