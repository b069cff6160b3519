"""Azure Blob Storage backend."""

from __future__ import annotations

import logging
from typing import Any, cast

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob.aio import BlobServiceClient

from claimcheck.errors import ProtocolMismatchError, StorageError
from claimcheck.storage.base import BlobAttributes, BlobHandle, BlobStore

logger = logging.getLogger(__name__)


class AzureBlobStore(BlobStore):
    """Azure Blob Storage implementation using azure-storage-blob aio client."""

    def __init__(
        self,
        connection_string: str | None = None,
        account_url: str | None = None,
        credential: str | None = None,
    ) -> None:
        if not connection_string and not account_url:
            raise ValueError(
                "Azure storage requires CLAIMCHECK_AZURE_CONNECTION_STRING "
                "or CLAIMCHECK_AZURE_ACCOUNT_URL"
            )
        self.connection_string = connection_string
        self.account_url = account_url
        self.credential = credential
        self._client: Any | None = None

    async def _get_client(self) -> Any:
        """Get or create BlobServiceClient."""
        if self._client is None:
            if self.connection_string:
                self._client = BlobServiceClient.from_connection_string(
                    self.connection_string
                )
            else:
                self._client = BlobServiceClient(
                    account_url=cast(str, self.account_url), credential=self.credential
                )
        return self._client

    async def _blob_client(self, handle: BlobHandle) -> Any:
        client = await self._get_client()
        return client.get_blob_client(container=handle.container, blob=handle.name)

    async def ensure_container(self, name: str) -> None:
        client = await self._get_client()
        try:
            await client.get_container_client(name).create_container()
        except ResourceExistsError:
            pass
        except AzureError as exc:
            raise StorageError(
                f"Cannot create container {name}: {exc}", container=name
            ) from exc

    async def upload(self, handle: BlobHandle, data: bytes) -> None:
        blob_client = await self._blob_client(handle)
        try:
            await blob_client.upload_blob(
                data,
                overwrite=True,
                metadata=dict(handle.metadata),
            )
        except AzureError as exc:
            raise StorageError(
                f"Upload failed for {handle.name}: {exc}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc

    async def fetch_attributes(self, handle: BlobHandle) -> BlobAttributes:
        blob_client = await self._blob_client(handle)
        try:
            properties = await blob_client.get_blob_properties()
        except ResourceNotFoundError as exc:
            raise ProtocolMismatchError(
                f"Blob not found: {handle.container}/{handle.name}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        except AzureError as exc:
            raise StorageError(
                f"Cannot read attributes of {handle.name}: {exc}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        return BlobAttributes(
            length=int(properties.size),
            metadata=dict(properties.metadata or {}),
        )

    async def download(self, handle: BlobHandle) -> bytes:
        blob_client = await self._blob_client(handle)
        try:
            stream = await blob_client.download_blob()
            data = await stream.readall()
        except ResourceNotFoundError as exc:
            raise ProtocolMismatchError(
                f"Blob not found: {handle.container}/{handle.name}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        except AzureError as exc:
            raise StorageError(
                f"Download failed for {handle.name}: {exc}",
                container=handle.container,
                blob_name=handle.name,
            ) from exc
        return cast(bytes, data)

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
