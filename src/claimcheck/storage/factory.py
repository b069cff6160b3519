"""Blob store factory for claimcheck."""

from __future__ import annotations

from typing import TYPE_CHECKING

from claimcheck.storage.azure import AzureBlobStore
from claimcheck.storage.base import BlobStore, BlobStoreFactory
from claimcheck.storage.local import LocalBlobStore
from claimcheck.storage.memory import InMemoryBlobStore
from claimcheck.storage.s3 import S3BlobStore

if TYPE_CHECKING:
    from claimcheck.config import Settings


def blob_store_factory(settings: Settings) -> BlobStoreFactory:
    """Return a factory that builds the configured backend from connection parameters.

    The factory is not invoked here; the hooks call it lazily on first use.
    """
    storage_type = settings.blob_storage_type.lower()

    if storage_type == "azure":
        if not settings.azure_connection_string and not settings.azure_account_url:
            raise ValueError(
                "CLAIMCHECK_AZURE_CONNECTION_STRING or CLAIMCHECK_AZURE_ACCOUNT_URL is "
                "required for blob_storage_type='azure'"
            )
        credential = settings.azure_account_key or settings.azure_sas_token

        def build_azure(connection_parameters: str) -> BlobStore:
            if settings.azure_connection_string:
                return AzureBlobStore(connection_string=connection_parameters)
            return AzureBlobStore(account_url=connection_parameters, credential=credential)

        return build_azure

    if storage_type in {"s3", "minio"}:

        def build_s3(connection_parameters: str) -> BlobStore:
            return S3BlobStore(
                endpoint_url=connection_parameters or None,
                region_name=settings.s3_region,
                aws_access_key_id=settings.s3_access_key_id,
                aws_secret_access_key=settings.s3_secret_access_key,
            )

        return build_s3

    if storage_type == "local":
        return lambda connection_parameters: LocalBlobStore(base_path=connection_parameters)

    if storage_type == "memory":
        # One shared store per factory so writer and reader see the same blobs
        store = InMemoryBlobStore()
        return lambda connection_parameters: store

    raise ValueError(
        "Unsupported blob_storage_type. Supported values: memory, local, azure, s3, minio."
    )


def build_blob_store(settings: Settings) -> BlobStore:
    """Build the configured backend immediately."""
    return blob_store_factory(settings)(settings.connection_parameters())
