"""Local filesystem blob store.

Stores blobs in a local directory structure:
    {base_path}/{container}/{blob_name}
    {base_path}/{container}/{blob_name}.metadata.json

This provides:
- Simple deployment (no external services)
- Easy inspection of offloaded payloads during development
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import cast

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
import orjson

from claimcheck.errors import ProtocolMismatchError, StorageError
from claimcheck.storage.base import BlobAttributes, BlobHandle, BlobStore

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".metadata.json"


class LocalBlobStore(BlobStore):
    """Local filesystem blob store backend."""

    def __init__(self, base_path: str | Path = "/var/lib/claimcheck/blobs"):
        """Initialize local blob store.

        Args:
            base_path: Base directory; each container is a subdirectory
        """
        self.base_path = Path(base_path)

    def _container_path(self, container: str) -> Path:
        return self.base_path / container

    def _get_blob_path(self, handle: BlobHandle) -> Path:
        """Resolve a blob path, refusing names that escape the container."""
        name = handle.name
        if not name or "/" in name or "\\" in name or ".." in name:
            raise ProtocolMismatchError(
                f"Invalid blob name: {name!r}",
                container=handle.container,
                blob_name=name,
            )
        container_path = self._container_path(handle.container).resolve()
        blob_path = (container_path / name).resolve()
        if blob_path.parent != container_path:
            raise ProtocolMismatchError(
                f"Blob name {name!r} points outside container {handle.container}",
                container=handle.container,
                blob_name=name,
            )
        return blob_path

    def _get_metadata_path(self, handle: BlobHandle) -> Path:
        blob_path = self._get_blob_path(handle)
        return blob_path.with_name(f"{blob_path.name}{METADATA_SUFFIX}")

    async def ensure_container(self, name: str) -> None:
        path = self._container_path(name)
        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create container {name}: {exc}", container=name) from exc

    async def upload(self, handle: BlobHandle, data: bytes) -> None:
        blob_path = self._get_blob_path(handle)
        try:
            # Metadata first so a visible blob always has its sidecar
            async with aiofiles.open(self._get_metadata_path(handle), "wb") as f:
                await f.write(orjson.dumps(handle.metadata))
            async with aiofiles.open(blob_path, "wb") as f:
                await f.write(data)
        except OSError as exc:
            raise StorageError(
                f"Upload failed for {handle.name}: {exc}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc

        logger.debug(f"Stored blob {handle.name} at {blob_path} ({len(data)} bytes)")

    async def _require(self, handle: BlobHandle) -> Path:
        blob_path = self._get_blob_path(handle)
        if not await aiofiles.os.path.isfile(blob_path):
            raise ProtocolMismatchError(
                f"Blob not found: {handle.container}/{handle.name}",
                container=handle.container,
                blob_name=handle.name,
            )
        return blob_path

    async def fetch_attributes(self, handle: BlobHandle) -> BlobAttributes:
        blob_path = await self._require(handle)
        metadata_path = self._get_metadata_path(handle)
        metadata: dict[str, str] = {}
        try:
            length = cast(int, (await aiofiles.os.stat(blob_path)).st_size)
            if await aiofiles.os.path.exists(metadata_path):
                async with aiofiles.open(metadata_path, "rb") as f:
                    metadata = orjson.loads(await f.read())
        except OSError as exc:
            raise StorageError(
                f"Cannot read attributes of {handle.name}: {exc}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        except orjson.JSONDecodeError as exc:
            raise ProtocolMismatchError(
                f"Malformed metadata for {handle.name}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        return BlobAttributes(length=length, metadata=metadata)

    async def download(self, handle: BlobHandle) -> bytes:
        blob_path = await self._require(handle)
        try:
            async with aiofiles.open(blob_path, "rb") as f:
                content = await f.read()
        except OSError as exc:
            raise StorageError(
                f"Download failed for {handle.name}: {exc}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        return cast(bytes, content)
