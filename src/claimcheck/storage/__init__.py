"""Blob store module for claimcheck.

Provides storage backends for offloaded message bodies:
- In-memory storage (tests, development)
- Local filesystem storage
- Azure Blob Storage
- S3-compatible storage (MinIO, AWS S3)
"""

from claimcheck.storage.azure import AzureBlobStore
from claimcheck.storage.base import (
    BlobAttributes,
    BlobHandle,
    BlobStore,
    BlobStoreFactory,
    LazyBlobStore,
)
from claimcheck.storage.factory import blob_store_factory, build_blob_store
from claimcheck.storage.local import LocalBlobStore
from claimcheck.storage.memory import InMemoryBlobStore
from claimcheck.storage.s3 import S3BlobStore

__all__ = [
    "BlobStore",
    "BlobStoreFactory",
    "BlobHandle",
    "BlobAttributes",
    "LazyBlobStore",
    "InMemoryBlobStore",
    "LocalBlobStore",
    "AzureBlobStore",
    "S3BlobStore",
    "blob_store_factory",
    "build_blob_store",
]
