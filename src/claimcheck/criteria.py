"""Offload threshold predicates.

A predicate receives the outgoing Message and returns True when the body
should be moved to blob storage. The writer calls it exactly once per message.
"""

from __future__ import annotations

from collections.abc import Callable

from claimcheck.message import Message

ThresholdPredicate = Callable[[Message], bool]

# Service Bus standard tier caps messages at 256KB; leave room for headers.
DEFAULT_THRESHOLD_BYTES = 192 * 1024


def body_size_exceeds(limit: int = DEFAULT_THRESHOLD_BYTES) -> ThresholdPredicate:
    """Offload when the body is strictly larger than ``limit`` bytes."""
    if limit < 0:
        raise ValueError("limit must be non-negative")

    def predicate(message: Message) -> bool:
        return message.size > limit

    return predicate


def content_type_matches(*prefixes: str) -> ThresholdPredicate:
    """Offload messages whose content type starts with any of ``prefixes``.

    Mirrors the media types that tend to grow (archives, images, video).
    """
    lowered = tuple(p.lower() for p in prefixes)

    def predicate(message: Message) -> bool:
        if not message.content_type:
            return False
        return message.content_type.lower().startswith(lowered)

    return predicate


def any_of(*predicates: ThresholdPredicate) -> ThresholdPredicate:
    """Offload when any of the given predicates fires."""

    def predicate(message: Message) -> bool:
        return any(p(message) for p in predicates)

    return predicate


def always() -> ThresholdPredicate:
    """Offload every message, regardless of size."""
    return lambda message: True
