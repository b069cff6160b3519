"""Tests for the message pipeline and claim-check registration."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path

import pytest

from claimcheck.config import AttachmentConfiguration
from claimcheck.criteria import body_size_exceeds
from claimcheck.message import Message
from claimcheck.pipeline import (
    CLAIM_CHECK_HOOK_NAME,
    MessagePipeline,
    PipelineStage,
    create_claim_check,
    use_claim_check,
)
from claimcheck.storage.local import LocalBlobStore

REFERENCE = "$attachment.blob"


class TestMessagePipeline:
    """Tests for hook registration and execution."""

    async def test_hooks_run_by_priority(self) -> None:
        pipeline = MessagePipeline()
        order: list[str] = []

        def recorder(label: str):
            async def hook(message: Message) -> Message:
                order.append(label)
                return message

            return hook

        pipeline.register(PipelineStage.BEFORE_SEND, recorder("low"), name="low", priority=1)
        pipeline.register(PipelineStage.BEFORE_SEND, recorder("high"), name="high", priority=10)

        await pipeline.run_before_send(Message())

        assert order == ["high", "low"]

    async def test_stages_are_separate(self) -> None:
        pipeline = MessagePipeline()
        seen: list[str] = []

        async def hook(message: Message) -> Message:
            seen.append("receive")
            return message

        pipeline.register(PipelineStage.AFTER_RECEIVE, hook)
        await pipeline.run_before_send(Message())

        assert seen == []
        assert [reg.name for reg in pipeline.hooks(PipelineStage.AFTER_RECEIVE)] == ["hook"]

    def test_duplicate_name_rejected(self) -> None:
        pipeline = MessagePipeline()

        async def hook(message: Message) -> Message:
            return message

        pipeline.register(PipelineStage.BEFORE_SEND, hook, name="same")
        with pytest.raises(ValueError):
            pipeline.register(PipelineStage.BEFORE_SEND, hook, name="same")

    def test_unregister(self) -> None:
        pipeline = MessagePipeline()

        async def hook(message: Message) -> Message:
            return message

        pipeline.register(PipelineStage.BEFORE_SEND, hook, name="h")
        pipeline.register(PipelineStage.AFTER_RECEIVE, hook, name="h")

        assert pipeline.unregister("h") is True
        assert pipeline.hooks(PipelineStage.BEFORE_SEND) == []
        assert pipeline.hooks(PipelineStage.AFTER_RECEIVE) == []
        assert pipeline.unregister("h") is False

    async def test_hook_errors_propagate(self) -> None:
        pipeline = MessagePipeline()

        async def failing(message: Message) -> Message:
            raise RuntimeError("boom")

        pipeline.register(PipelineStage.AFTER_RECEIVE, failing)

        with pytest.raises(RuntimeError, match="boom"):
            await pipeline.run_after_receive(Message())


class TestClaimCheckRoundTrip:
    """End-to-end offload and restore through a pipeline."""

    @pytest.mark.parametrize("size", [1024 * 1024 + 1, 3 * 1024 * 1024])
    async def test_roundtrip(self, configuration, size: int) -> None:
        pipeline = MessagePipeline()
        use_claim_check(pipeline, configuration)
        body = bytes(range(256)) * (size // 256) + b"tail"

        sent = await pipeline.run_before_send(
            Message(body=body, message_id="m-1", time_to_live=timedelta(minutes=5))
        )
        assert sent.body is None

        # Simulate transport: only properties travel with the message
        received = Message(body=None, properties=dict(sent.properties))
        restored = await pipeline.run_after_receive(received)

        assert restored.body == body
        assert REFERENCE in restored.properties

    async def test_small_messages_untouched_both_ways(self, configuration, blob_store) -> None:
        pipeline = MessagePipeline()
        use_claim_check(pipeline, configuration)
        message = Message(body=b"tiny")

        await pipeline.run_before_send(message)
        await pipeline.run_after_receive(message)

        assert message.body == b"tiny"
        assert message.properties == {}
        assert len(blob_store) == 0

    async def test_registers_both_stages(self, configuration) -> None:
        pipeline = MessagePipeline()
        use_claim_check(pipeline, configuration)

        for stage in PipelineStage:
            assert [reg.name for reg in pipeline.hooks(stage)] == [CLAIM_CHECK_HOOK_NAME]

    async def test_single_store_shared(self, configuration, store_factory) -> None:
        claim_check = create_claim_check(configuration)
        message = Message(body=b"x" * (1024 * 1024 + 1))

        await asyncio.gather(
            claim_check.writer.before_send(Message(body=b"y" * (1024 * 1024 + 1))),
            claim_check.writer.before_send(message),
        )
        await claim_check.reader.after_receive(message)

        assert store_factory.calls == 1
        await claim_check.close()
        assert not claim_check.blob_store.initialized

    async def test_roundtrip_with_local_store(self, tmp_path: Path) -> None:
        configuration = AttachmentConfiguration(
            connection_parameters=str(tmp_path),
            container_name="payloads",
            size_exceeds_threshold=body_size_exceeds(16),
            blob_store_factory=lambda path: LocalBlobStore(base_path=path),
        )
        claim_check = create_claim_check(configuration)
        body = b"a fairly long message body that crosses the threshold"
        message = Message(body=body)

        await claim_check.writer.before_send(message)
        blob_name = message.properties[REFERENCE]
        assert (tmp_path / "payloads" / blob_name).read_bytes() == body

        await claim_check.reader.after_receive(message)
        assert message.body == body
