"""
Configuration validation module.

Validates the sync and logging settings on startup to catch issues early and
provide clear error messages for misconfigurations.
"""

import os
from typing import Dict, List, Any, Optional, Tuple
from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


class ConfigValidator:
    """Validates application configuration"""

    def __init__(self,
                 sync_config: Optional[Dict[str, Any]] = None,
                 logging_config: Optional[Dict[str, Any]] = None):
        """
        Args:
            sync_config: Sync settings, defaults to config.SYNC_CONFIG
            logging_config: Logging settings, defaults to config.LOGGING_CONFIG
        """
        if sync_config is None or logging_config is None:
            from config import SYNC_CONFIG, LOGGING_CONFIG
            sync_config = SYNC_CONFIG if sync_config is None else sync_config
            logging_config = LOGGING_CONFIG if logging_config is None else logging_config

        self.sync_config = sync_config
        self.logging_config = logging_config
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """
        Validate all configuration settings.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors.clear()
        self.warnings.clear()

        self._validate_network_config()
        self._validate_sync_config()
        self._validate_logging_config()
        self._validate_file_paths()

        is_valid = len(self.errors) == 0
        return is_valid, self.errors.copy(), self.warnings.copy()

    def _validate_network_config(self):
        """Validate the WebSocket endpoint and reconnect delay"""
        url = self.sync_config.get("websocket_url", "")
        if not url or not url.startswith(("ws://", "wss://")):
            self.errors.append(f"WebSocket URL has invalid format: {url!r}. Must start with ws:// or wss://")

        delay = self.sync_config.get("reconnect_delay", 3.0)
        if not isinstance(delay, (int, float)) or delay <= 0:
            self.errors.append(f"Reconnect delay must be a positive number of seconds, got {delay!r}")
        elif delay < 0.5 or delay > 60.0:
            self.warnings.append(f"Reconnect delay {delay}s may be too {'low' if delay < 0.5 else 'high'}. Recommended: 1-10s")

    def _validate_sync_config(self):
        """Validate activity feed and client identity settings"""
        limit = self.sync_config.get("activity_limit", 100)
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            self.errors.append(f"Activity limit must be a positive integer, got {limit!r}")

        client_name = self.sync_config.get("client_name", "")
        if not client_name or not str(client_name).strip():
            self.errors.append("Client name must not be empty")

    def _validate_logging_config(self):
        """Validate logging configuration"""
        log_level = self.logging_config.get("log_level", "INFO")
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if str(log_level).upper() not in valid_levels:
            self.errors.append(f"Invalid log level '{log_level}'. Must be one of: {', '.join(valid_levels)}")

        max_size = self.logging_config.get("max_log_size_mb", 10)
        if max_size < 1 or max_size > 1000:
            self.warnings.append(f"Log file size {max_size}MB may be {'too small' if max_size < 5 else 'too large'}. Recommended: 5-100MB")

        backup_count = self.logging_config.get("backup_count", 5)
        if backup_count < 1 or backup_count > 50:
            self.warnings.append(f"Log backup count {backup_count} may be {'too low' if backup_count < 3 else 'too high'}. Recommended: 3-20")

    def _validate_file_paths(self):
        """Validate that log and download directories can be created"""
        paths = {"Download directory": self.sync_config.get("download_dir", "./downloads")}
        if self.logging_config.get("enable_file_logging", True):
            paths["Log directory"] = self.logging_config.get("log_dir", "./logs")

        for label, directory in paths.items():
            parent_dir = Path(directory).resolve().parent
            if not parent_dir.exists():
                self.errors.append(f"{label} parent '{parent_dir}' does not exist")
            elif not os.access(parent_dir, os.W_OK):
                self.errors.append(f"{label} parent '{parent_dir}' is not writable")


def validate_startup_config(sync_config: Optional[Dict[str, Any]] = None,
                            logging_config: Optional[Dict[str, Any]] = None) -> List[str]:
    """
    Validate configuration on startup.

    Returns:
        List of warnings

    Raises:
        ConfigValidationError: If critical configuration errors are found
    """
    validator = ConfigValidator(sync_config, logging_config)
    is_valid, errors, warnings = validator.validate_all()

    for warning in warnings:
        logger.warning(f"Configuration warning: {warning}")

    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")

        error_msg = f"Found {len(errors)} configuration error(s) that must be fixed before starting."
        if warnings:
            error_msg += f" Also found {len(warnings)} warning(s) that should be addressed."

        raise ConfigValidationError(error_msg)

    return warnings
