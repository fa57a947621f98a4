"""
Centralized configuration for the dashboard sync engine
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Server endpoint
DEFAULT_WEBSOCKET_URL = "ws://localhost:3000/ws/client"

# Sync engine settings
SYNC_CONFIG = {
    "websocket_url": os.getenv("LOGOS_WS_URL", DEFAULT_WEBSOCKET_URL),
    "reconnect_delay": float(os.getenv("LOGOS_RECONNECT_DELAY", "3.0")),  # Seconds, fixed
    "client_name": os.getenv("LOGOS_CLIENT_NAME", "Dashboard"),  # Name sent with JoinStorage
    "activity_limit": 100,  # Max entries kept in the activity feed
    "download_dir": os.getenv("LOGOS_DOWNLOAD_DIR", "./downloads")
}

# Logging configuration
LOGGING_CONFIG = {
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "log_dir": os.getenv("LOG_DIR", "./logs"),
    "enable_file_logging": os.getenv("ENABLE_FILE_LOGGING", "true").lower() == "true",
    "enable_console_logging": os.getenv("ENABLE_CONSOLE_LOGGING", "true").lower() == "true",
    "structured_logging": os.getenv("ENVIRONMENT", "development").lower() == "production",
    "max_log_size_mb": int(os.getenv("MAX_LOG_SIZE_MB", "10")),
    "backup_count": int(os.getenv("LOG_BACKUP_COUNT", "5")),
}
