"""Shared fixtures for claimcheck tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from claimcheck.config import AttachmentConfiguration
from claimcheck.criteria import body_size_exceeds
from claimcheck.storage.base import BlobStore
from claimcheck.storage.memory import InMemoryBlobStore

MiB = 1024 * 1024


class CountingFactory:
    """Blob store factory that records how often it is invoked."""

    def __init__(self, store: BlobStore) -> None:
        self.store = store
        self.calls = 0

    def __call__(self, connection_parameters: str) -> BlobStore:
        self.calls += 1
        return self.store


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    """Create a fresh in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def store_factory(blob_store: InMemoryBlobStore) -> CountingFactory:
    return CountingFactory(blob_store)


@pytest.fixture
def make_configuration(
    store_factory: CountingFactory,
) -> Callable[..., AttachmentConfiguration]:
    """Build configurations backed by the in-memory store."""

    def build(**overrides: object) -> AttachmentConfiguration:
        values: dict[str, object] = {
            "connection_parameters": "UseDevelopmentStorage=true",
            "container_name": "attachments",
            "reference_property_name": "$attachment.blob",
            "size_exceeds_threshold": body_size_exceeds(MiB),
            "blob_store_factory": store_factory,
        }
        values.update(overrides)
        return AttachmentConfiguration(**values)  # type: ignore[arg-type]

    return build


@pytest.fixture
def configuration(
    make_configuration: Callable[..., AttachmentConfiguration],
) -> AttachmentConfiguration:
    return make_configuration()

