"""In-memory blob store.

Suitable for tests and single-process development. Blobs live in a dict
keyed by (container, name) and vanish with the process.
"""

from __future__ import annotations

import logging

from claimcheck.errors import ProtocolMismatchError
from claimcheck.storage.base import BlobAttributes, BlobHandle, BlobStore

logger = logging.getLogger(__name__)


class InMemoryBlobStore(BlobStore):
    """Dict-backed blob store."""

    def __init__(self) -> None:
        self.containers: set[str] = set()
        self.blobs: dict[tuple[str, str], tuple[bytes, dict[str, str]]] = {}

    async def ensure_container(self, name: str) -> None:
        self.containers.add(name)

    async def upload(self, handle: BlobHandle, data: bytes) -> None:
        self.blobs[(handle.container, handle.name)] = (bytes(data), dict(handle.metadata))
        logger.debug(f"Stored blob {handle.name} in {handle.container} ({len(data)} bytes)")

    def _get(self, handle: BlobHandle) -> tuple[bytes, dict[str, str]]:
        try:
            return self.blobs[(handle.container, handle.name)]
        except KeyError:
            raise ProtocolMismatchError(
                f"Blob not found: {handle.container}/{handle.name}",
                container=handle.container,
                blob_name=handle.name,
            ) from None

    async def fetch_attributes(self, handle: BlobHandle) -> BlobAttributes:
        data, metadata = self._get(handle)
        return BlobAttributes(length=len(data), metadata=dict(metadata))

    async def download(self, handle: BlobHandle) -> bytes:
        data, _ = self._get(handle)
        return data

    def __len__(self) -> int:
        return len(self.blobs)
