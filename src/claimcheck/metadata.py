"""Reserved blob metadata written alongside an offloaded body.

- ``_MessageId``: the originating message id, when one is set
- ``_ValidUntilUtc``: send time plus time-to-live, unless the TTL is infinite

Both are advisory. Nothing in this package enforces expiry or deletes blobs.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from claimcheck.clock import Clock, format_valid_until, is_infinite, parse_valid_until, valid_until
from claimcheck.message import Message

MESSAGE_ID_KEY = "_MessageId"
VALID_UNTIL_KEY = "_ValidUntilUtc"


def attachment_metadata(message: Message, clock: Clock) -> dict[str, str]:
    """Build the reserved metadata entries for an outgoing message."""
    metadata: dict[str, str] = {}

    if message.message_id and message.message_id.strip():
        metadata[MESSAGE_ID_KEY] = message.message_id

    if not is_infinite(message.time_to_live):
        expires = valid_until(clock(), message.time_to_live)
        metadata[VALID_UNTIL_KEY] = format_valid_until(expires)

    return metadata


def lookup(metadata: Mapping[str, str], key: str) -> str | None:
    """Find a metadata value, tolerating backends that lower-case keys."""
    if key in metadata:
        return metadata[key]
    lowered = key.lower()
    for name, value in metadata.items():
        if name.lower() == lowered:
            return value
    return None


def read_valid_until(metadata: Mapping[str, str]) -> datetime | None:
    value = lookup(metadata, VALID_UNTIL_KEY)
    if value is None:
        return None
    return parse_valid_until(value)
