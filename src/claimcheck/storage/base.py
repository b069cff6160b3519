"""Base blob store interface.

Defines the capability the claim-check hooks need from a storage backend.
Handles are cheap local references; only ensure_container, upload,
fetch_attributes and download touch the network.
"""

from __future__ import annotations

import asyncio
import threading
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from claimcheck.errors import ClaimCheckError, ConfigurationError, StorageError

T = TypeVar("T")


@dataclass
class BlobHandle:
    """Reference to a blob in a container.

    Metadata collected here before upload is written together with the content.
    """

    container: str
    name: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BlobAttributes:
    """Attributes reported by the backend for a stored blob."""

    length: int
    metadata: dict[str, str] = field(default_factory=dict)


class BlobStore(ABC):
    """Abstract base class for blob store backends."""

    @abstractmethod
    async def ensure_container(self, name: str) -> None:
        """Create the container if it does not exist. Idempotent."""
        ...

    def create_blob(self, container: str, name: str) -> BlobHandle:
        """Resolve a handle for a blob. No network access."""
        return BlobHandle(container=container, name=name)

    def set_metadata(self, handle: BlobHandle, key: str, value: str) -> None:
        """Attach a metadata entry to be written on upload."""
        handle.metadata[key] = value

    @abstractmethod
    async def upload(self, handle: BlobHandle, data: bytes) -> None:
        """Upload the full content and the handle's metadata.

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def fetch_attributes(self, handle: BlobHandle) -> BlobAttributes:
        """Fetch length and metadata of a stored blob.

        Raises:
            ProtocolMismatchError: If the blob does not exist
            StorageError: If the backend is unreachable
        """
        ...

    @abstractmethod
    async def download(self, handle: BlobHandle) -> bytes:
        """Download the full content of a stored blob.

        Raises:
            ProtocolMismatchError: If the blob does not exist
            StorageError: If the backend is unreachable
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None


BlobStoreFactory = Callable[[str], BlobStore]


class LazyBlobStore:
    """Creates the backend on first use and shares it afterwards.

    The factory runs under a lock so concurrent first callers never build
    two clients. Construction must not perform network I/O.
    """

    def __init__(self, factory: BlobStoreFactory, connection_parameters: str) -> None:
        self._factory = factory
        self._connection_parameters = connection_parameters
        self._store: BlobStore | None = None
        self._lock = threading.Lock()

    def get(self) -> BlobStore:
        store = self._store
        if store is not None:
            return store
        with self._lock:
            if self._store is None:
                try:
                    self._store = self._factory(self._connection_parameters)
                except (TypeError, ValueError) as exc:
                    raise ConfigurationError(f"Cannot create blob store: {exc}") from exc
            return self._store

    @property
    def initialized(self) -> bool:
        return self._store is not None

    async def close(self) -> None:
        with self._lock:
            store, self._store = self._store, None
        if store is not None:
            await store.close()


async def run_storage_io(
    operation: Awaitable[T],
    timeout: float | None,
    *,
    action: str,
    container: str | None = None,
    blob_name: str | None = None,
) -> T:
    """Await a storage operation under an optional deadline.

    Backend failures that are not already StorageErrors are wrapped in one.
    TimeoutError and cancellation propagate unchanged.
    """
    try:
        return await asyncio.wait_for(operation, timeout)
    except (ClaimCheckError, TimeoutError):
        raise
    except Exception as exc:
        raise StorageError(
            f"{action} failed: {exc}", container=container, blob_name=blob_name
        ) from exc
