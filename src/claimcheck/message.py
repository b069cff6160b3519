"""Message envelope passed through the send/receive pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from claimcheck.clock import INFINITE_TTL


@dataclass(eq=False)
class Message:
    """Mutable message envelope.

    Owned by the pipeline invoking the hooks. Hooks mutate fields in place
    and hand back the same instance.
    """

    body: bytes | None = None
    message_id: str | None = None
    time_to_live: timedelta = INFINITE_TTL
    properties: dict[str, Any] = field(default_factory=dict)
    content_type: str | None = None

    @property
    def size(self) -> int:
        """Body length in bytes (0 when the body is empty or cleared)."""
        return len(self.body) if self.body else 0
