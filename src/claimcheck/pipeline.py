"""Message pipeline hooks and claim-check registration.

A pipeline holds two ordered hook lists, one per stage. The bus client
calls run_before_send before handing a message to the transport and
run_after_receive after taking one from it, for every message.

Example:
    pipeline = MessagePipeline()
    claim_check = use_claim_check(pipeline, settings.to_configuration())

    message = await pipeline.run_before_send(message)
    ...
    message = await pipeline.run_after_receive(message)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto

from claimcheck.clock import Clock, utc_now
from claimcheck.config import AttachmentConfiguration, require_configuration
from claimcheck.message import Message
from claimcheck.reader import AttachmentReader
from claimcheck.storage.base import LazyBlobStore
from claimcheck.writer import AttachmentWriter

logger = logging.getLogger(__name__)

MessageHook = Callable[[Message], Awaitable[Message]]

CLAIM_CHECK_HOOK_NAME = "claim-check"


class PipelineStage(Enum):
    """Points in the message lifecycle where hooks run."""

    BEFORE_SEND = auto()
    AFTER_RECEIVE = auto()


@dataclass
class HookRegistration:
    """Registration of a message hook."""

    stage: PipelineStage
    name: str
    hook: MessageHook
    priority: int = 0  # Higher priority runs first

    def __lt__(self, other: HookRegistration) -> bool:
        """Compare by priority for sorting (higher first)."""
        return self.priority > other.priority


class MessagePipeline:
    """Ordered before-send and after-receive hooks."""

    def __init__(self) -> None:
        self._hooks: dict[PipelineStage, list[HookRegistration]] = {
            stage: [] for stage in PipelineStage
        }

    def register(
        self,
        stage: PipelineStage,
        hook: MessageHook,
        name: str | None = None,
        priority: int = 0,
    ) -> HookRegistration:
        """Register a hook for a stage.

        Raises:
            ValueError: If a hook with the same name is already registered for the stage
        """
        name = name or getattr(hook, "__name__", type(hook).__name__)
        if any(reg.name == name for reg in self._hooks[stage]):
            raise ValueError(f"Hook already registered for {stage.name}: {name}")

        registration = HookRegistration(stage=stage, name=name, hook=hook, priority=priority)
        self._hooks[stage].append(registration)
        self._hooks[stage].sort()
        logger.debug(f"Registered {stage.name} hook: {name}")
        return registration

    def unregister(self, name: str) -> bool:
        """Remove every hook registered under ``name``. Returns True if any was removed."""
        removed = False
        for stage in PipelineStage:
            kept = [reg for reg in self._hooks[stage] if reg.name != name]
            removed = removed or len(kept) != len(self._hooks[stage])
            self._hooks[stage] = kept
        return removed

    def hooks(self, stage: PipelineStage) -> list[HookRegistration]:
        return list(self._hooks[stage])

    async def run_before_send(self, message: Message) -> Message:
        return await self._run(PipelineStage.BEFORE_SEND, message)

    async def run_after_receive(self, message: Message) -> Message:
        return await self._run(PipelineStage.AFTER_RECEIVE, message)

    async def _run(self, stage: PipelineStage, message: Message) -> Message:
        # Errors propagate; the caller fails the send or receive
        for registration in list(self._hooks[stage]):
            message = await registration.hook(message)
        return message


@dataclass
class ClaimCheck:
    """Writer and reader sharing one lazily created blob store."""

    writer: AttachmentWriter
    reader: AttachmentReader
    blob_store: LazyBlobStore

    async def close(self) -> None:
        await self.blob_store.close()


def create_claim_check(
    configuration: AttachmentConfiguration,
    clock: Clock = utc_now,
) -> ClaimCheck:
    """Build a writer/reader pair over a single shared blob store."""
    configuration = require_configuration(configuration)
    blob_store = LazyBlobStore(
        configuration.blob_store_factory, configuration.connection_parameters
    )
    return ClaimCheck(
        writer=AttachmentWriter(configuration, clock=clock, blob_store=blob_store),
        reader=AttachmentReader(configuration, clock=clock, blob_store=blob_store),
        blob_store=blob_store,
    )


def use_claim_check(
    pipeline: MessagePipeline,
    configuration: AttachmentConfiguration,
    clock: Clock = utc_now,
    priority: int = 0,
) -> ClaimCheck:
    """Register the claim-check hooks on both stages of a pipeline."""
    claim_check = create_claim_check(configuration, clock=clock)
    pipeline.register(
        PipelineStage.BEFORE_SEND,
        claim_check.writer.before_send,
        name=CLAIM_CHECK_HOOK_NAME,
        priority=priority,
    )
    pipeline.register(
        PipelineStage.AFTER_RECEIVE,
        claim_check.reader.after_receive,
        name=CLAIM_CHECK_HOOK_NAME,
        priority=priority,
    )
    logger.info(
        "Registered claim-check hooks",
        extra={
            "container": configuration.container_name,
            "reference_property": configuration.reference_property_name,
        },
    )
    return claim_check
