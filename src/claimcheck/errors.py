"""Error taxonomy for the claim-check hooks.

- ConfigurationError: invalid configuration, raised once at construction
- StorageError: container/blob creation, upload or download failures
- ProtocolMismatchError: a reference that cannot be resolved to a usable blob
"""

from __future__ import annotations


class ClaimCheckError(Exception):
    """Base class for claim-check errors."""


class ConfigurationError(ClaimCheckError):
    """Raised when an AttachmentConfiguration is missing or invalid."""


class StorageError(ClaimCheckError):
    """Raised when a blob store operation fails."""

    def __init__(
        self,
        message: str,
        container: str | None = None,
        blob_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.container = container
        self.blob_name = blob_name


class ProtocolMismatchError(StorageError):
    """Raised when a reference property points to a missing or malformed blob."""
