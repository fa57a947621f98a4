"""
Exceptions raised while decoding and encoding sync protocol frames
"""

from typing import Optional, Dict, Any


class SyncError(Exception):
    """Base exception for all dashboard sync errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class MessageDecodeError(SyncError):
    """Raised when a text frame or its payload cannot be decoded"""
    pass


class AmbiguousEnvelopeError(MessageDecodeError):
    """Raised when an envelope carries more than one recognized variant key"""

    def __init__(self, keys):
        super().__init__(
            f"Envelope carries {len(keys)} variant keys: {', '.join(sorted(keys))}",
            details={"keys": sorted(keys)}
        )
        self.keys = sorted(keys)
