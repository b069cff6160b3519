"""Post-receive hook: restore offloaded message bodies from blob storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from claimcheck.clock import Clock, utc_now
from claimcheck.config import AttachmentConfiguration, require_configuration
from claimcheck.errors import ProtocolMismatchError, StorageError
from claimcheck.message import Message
from claimcheck.metadata import MESSAGE_ID_KEY, lookup, read_valid_until
from claimcheck.observability.logging import LogContext
from claimcheck.storage.base import BlobAttributes, LazyBlobStore, run_storage_io

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentInfo:
    """Stored attributes of an offloaded body."""

    blob_name: str
    length: int
    message_id: str | None = None
    valid_until: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def is_expired(self, now: datetime) -> bool:
        """Whether the advisory expiry has passed. Never enforced by the reader."""
        return self.valid_until is not None and now >= self.valid_until


class AttachmentReader:
    """Resolves blob references carried by received messages.

    The blob is never deleted and the reference property is left on the
    message. ``_ValidUntilUtc`` is not consulted when restoring.
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

    async def after_receive(self, message: Message, timeout: float | None = None) -> Message:
        """Restore the body if the message carries a blob reference.

        Raises:
            ProtocolMismatchError: If the reference is malformed or the blob is missing
            StorageError: If the download fails
            TimeoutError: If the deadline expires; the message is left untouched
        """
        reference_property = self.configuration.reference_property_name
        if reference_property not in message.properties:
            return message

        blob_name = self._blob_name(message.properties[reference_property])

        with LogContext(message_id=message.message_id, blob_name=blob_name):
            try:
                body = await run_storage_io(
                    self._fetch_body(blob_name),
                    timeout,
                    action="Download",
                    container=self.configuration.container_name,
                    blob_name=blob_name,
                )
            except StorageError as exc:
                logger.error(
                    "Failed to restore message body",
                    extra={"container": self.configuration.container_name, "error": str(exc)},
                )
                raise

            message.body = body
            logger.info(
                "Restored message body",
                extra={"container": self.configuration.container_name, "size_bytes": len(body)},
            )

        return message

    def _blob_name(self, value: object) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ProtocolMismatchError(
                f"Invalid attachment reference {value!r} in property "
                f"{self.configuration.reference_property_name!r}",
                container=self.configuration.container_name,
            )
        return value

    async def _attributes(self, blob_name: str) -> BlobAttributes:
        store = self._blob_store.get()
        container = self.configuration.container_name
        await store.ensure_container(container)
        return await store.fetch_attributes(store.create_blob(container, blob_name))

    async def _fetch_body(self, blob_name: str) -> bytes:
        store = self._blob_store.get()
        attributes = await self._attributes(blob_name)
        data = await store.download(
            store.create_blob(self.configuration.container_name, blob_name)
        )
        if len(data) != attributes.length:
            raise ProtocolMismatchError(
                f"Blob {blob_name} length mismatch: expected {attributes.length}, "
                f"downloaded {len(data)}",
                container=self.configuration.container_name,
                blob_name=blob_name,
            )
        return data

    async def describe(self, blob_name: str, timeout: float | None = None) -> AttachmentInfo:
        """Read the stored attributes of an attachment without downloading it."""
        blob_name = self._blob_name(blob_name)
        attributes = await run_storage_io(
            self._attributes(blob_name),
            timeout,
            action="Fetch attributes",
            container=self.configuration.container_name,
            blob_name=blob_name,
        )
        try:
            expires = read_valid_until(attributes.metadata)
        except ValueError as exc:
            raise ProtocolMismatchError(
                f"Malformed expiry metadata on blob {blob_name}",
                container=self.configuration.container_name,
                blob_name=blob_name,
            ) from exc
        return AttachmentInfo(
            blob_name=blob_name,
            length=attributes.length,
            message_id=lookup(attributes.metadata, MESSAGE_ID_KEY),
            valid_until=expires,
            metadata=attributes.metadata,
        )

    def now(self) -> datetime:
        return self._clock()
