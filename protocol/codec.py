"""
JSON wire codec for dashboard sync frames

Inbound text frames are single-key envelopes such as {"FileUpdate": {...}}.
Outbound commands are either a bare JSON string or the same envelope shape.
"""

import json
from typing import Any, Dict, Optional

from .exceptions import MessageDecodeError, AmbiguousEnvelopeError
from .messages import INBOUND_MESSAGE_TYPES, BARE_COMMANDS


def decode_frame(text: str) -> Optional[Any]:
    """
    Decode a text frame into an inbound message object.

    Args:
        text: Raw text frame

    Returns:
        The decoded message, or None when the frame carries no recognized
        variant (unknown envelopes and non-object JSON are ignored)

    Raises:
        MessageDecodeError: Invalid JSON or a malformed payload
        AmbiguousEnvelopeError: More than one recognized variant key
    """
    try:
        envelope = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow
        raise MessageDecodeError(f"Invalid JSON frame: {e}", details={"raw": text}) from e

    if not isinstance(envelope, dict):
        return None

    keys = [key for key in envelope if key in INBOUND_MESSAGE_TYPES]
    if not keys:
        return None
    if len(keys) > 1:
        raise AmbiguousEnvelopeError(keys)

    variant = keys[0]
    payload = envelope[variant]
    if not isinstance(payload, dict):
        raise MessageDecodeError(f"{variant} payload must be an object", details={"payload": payload})

    return INBOUND_MESSAGE_TYPES[variant].from_payload(payload)


def encode_command(name: str, payload: Optional[Dict[str, Any]] = None) -> str:
    """
    Encode an outbound command.

    Bare commands serialize to a JSON string, all others to a single-key
    envelope wrapping their payload.
    """
    if name in BARE_COMMANDS:
        if payload:
            raise ValueError(f"{name} does not take a payload")
        return json.dumps(name)

    return json.dumps({name: payload or {}})
