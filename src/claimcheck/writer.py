"""Pre-send hook: offload oversized message bodies to blob storage.

The writer consults the configured threshold predicate once. Small messages
pass through untouched without any storage call. Oversized bodies are
uploaded under a fresh UUID4 blob name, then the message body is cleared and
the reference property set in a single step.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from claimcheck.clock import Clock, utc_now
from claimcheck.config import AttachmentConfiguration, require_configuration
from claimcheck.errors import StorageError
from claimcheck.message import Message
from claimcheck.metadata import attachment_metadata
from claimcheck.observability.logging import LogContext
from claimcheck.storage.base import LazyBlobStore, run_storage_io

logger = logging.getLogger(__name__)


class AttachmentWriter:
    """Stores message bodies that exceed the offload threshold.

    Example:
        writer = AttachmentWriter(configuration)
        message = await writer.before_send(message)
    """

    def __init__(
        self,
        configuration: AttachmentConfiguration,
        clock: Clock = utc_now,
        blob_store: LazyBlobStore | None = None,
    ) -> None:
        self.configuration = require_configuration(configuration)
        self._clock = clock
        self._blob_store = blob_store or LazyBlobStore(
            self.configuration.blob_store_factory,
            self.configuration.connection_parameters,
        )

    async def before_send(self, message: Message, timeout: float | None = None) -> Message:
        """Offload the body if the message qualifies.

        Args:
            message: Outgoing message, mutated in place
            timeout: Optional deadline in seconds for the storage round trip

        Returns:
            The same message, either untouched or carrying a blob reference

        Raises:
            StorageError: If the container cannot be created or the upload fails
            TimeoutError: If the deadline expires; the message is left untouched
        """
        if not self.configuration.size_exceeds_threshold(message):
            logger.debug("Message below offload threshold", extra={"size_bytes": message.size})
            return message

        blob_name = str(uuid4())
        body = message.body or b""

        with LogContext(message_id=message.message_id, blob_name=blob_name):
            try:
                await run_storage_io(
                    self._store_body(message, blob_name, body),
                    timeout,
                    action="Upload",
                    container=self.configuration.container_name,
                    blob_name=blob_name,
                )
            except StorageError as exc:
                logger.error(
                    "Failed to offload message body",
                    extra={"container": self.configuration.container_name, "error": str(exc)},
                )
                raise

            # Applied together, with no suspension point in between
            message.body = None
            message.properties[self.configuration.reference_property_name] = blob_name

            logger.info(
                "Offloaded message body",
                extra={"container": self.configuration.container_name, "size_bytes": len(body)},
            )

        return message

    async def _store_body(self, message: Message, blob_name: str, body: bytes) -> None:
        store = self._blob_store.get()
        container = self.configuration.container_name

        await store.ensure_container(container)
        handle = store.create_blob(container, blob_name)
        for key, value in attachment_metadata(message, self._clock).items():
            store.set_metadata(handle, key, value)

        await store.upload(handle, body)
