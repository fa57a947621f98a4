"""
WebSocket connection lifecycle
"""

from .manager import ConnectionManager, ConnectionState

__all__ = ["ConnectionManager", "ConnectionState"]
