"""
Logging setup for the dashboard sync engine.

Modules log through get_logger(__name__); the runner calls setup_logging()
once. Each line is tagged with the component that wrote it (connection,
protocol, store, transfers, ...) and any ``extra_data`` dict passed with the
record, e.g. the connection attempt or the download path.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FILE_NAME = "dashboard_sync.log"

# websocket-client traces every frame at DEBUG
QUIET_LOGGERS = ("websocket", "urllib3")


def component_of(record: logging.LogRecord) -> str:
    """Top-level package of the logger that emitted the record"""
    return record.name.split(".", 1)[0]


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for production log shipping"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "component": component_of(record),
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "extra_data", None) or {})

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ComponentFormatter(logging.Formatter):
    """[HH:MM:SS] [LEVEL] [component] message, with the level colored on consoles"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[92m',
        'WARNING': '\033[93m',
        'ERROR': '\033[91m',
        'CRITICAL': '\033[95m',
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__(datefmt='%H:%M:%S')
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_color and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"

        line = f"[{self.formatTime(record, self.datefmt)}] [{level}] [{component_of(record)}] {record.getMessage()}"

        extra = getattr(record, "extra_data", None)
        if extra:
            line += " " + " ".join(f"{key}={value}" for key, value in extra.items())

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return line


def setup_logging(config_dict: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Install the console and rotating file handlers on the root logger.

    Args:
        config_dict: Logging settings, defaults to config.LOGGING_CONFIG

    Returns:
        The configured root logger
    """
    if config_dict is None:
        from config import LOGGING_CONFIG
        config_dict = LOGGING_CONFIG

    level = getattr(logging, str(config_dict.get("log_level", "INFO")).upper())
    structured = config_dict.get("structured_logging", False)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    if config_dict.get("enable_console_logging", True):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(JsonFormatter() if structured else ComponentFormatter())
        root_logger.addHandler(console_handler)

    log_file = None
    if config_dict.get("enable_file_logging", True):
        log_dir = Path(config_dict.get("log_dir", "./logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=int(config_dict.get("max_log_size_mb", 10)) * 1024 * 1024,
            backupCount=int(config_dict.get("backup_count", 5)),
            encoding='utf-8'
        )
        file_handler.setFormatter(JsonFormatter() if structured else ComponentFormatter(use_color=False))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info("Logging configured", extra={"extra_data": {
        "level": logging.getLevelName(level),
        "structured": structured,
        "log_file": str(log_file) if log_file else None,
    }})
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger; nothing is configured until setup_logging() runs"""
    return logging.getLogger(name)
