"""
Wire protocol: message types, codec, command encoding and dispatch
"""

from .exceptions import SyncError, MessageDecodeError, AmbiguousEnvelopeError
from .messages import (
    ActivityType, ActivityEntry, StorageInfo, FileMetadata, ClientInfo, Stats, Command
)
from .codec import decode_frame, encode_command

__all__ = [
    "SyncError", "MessageDecodeError", "AmbiguousEnvelopeError",
    "ActivityType", "ActivityEntry", "StorageInfo", "FileMetadata", "ClientInfo", "Stats",
    "Command", "decode_frame", "encode_command",
]
