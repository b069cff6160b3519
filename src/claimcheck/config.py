from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from claimcheck.criteria import DEFAULT_THRESHOLD_BYTES, ThresholdPredicate, body_size_exceeds
from claimcheck.errors import ConfigurationError

if TYPE_CHECKING:
    from claimcheck.storage.base import BlobStoreFactory

DEFAULT_REFERENCE_PROPERTY = "$attachment.blob"


@dataclass(frozen=True)
class AttachmentConfiguration:
    """Immutable claim-check configuration shared by the writer and reader.

    Created once at startup and read concurrently by every hook invocation.
    ``connection_parameters`` is opaque here; it is handed to
    ``blob_store_factory`` the first time a store is needed.
    """

    connection_parameters: str
    container_name: str
    size_exceeds_threshold: ThresholdPredicate
    blob_store_factory: BlobStoreFactory
    reference_property_name: str = DEFAULT_REFERENCE_PROPERTY

    def __post_init__(self) -> None:
        if not isinstance(self.connection_parameters, str):
            raise ConfigurationError("connection_parameters must be a string")
        if not isinstance(self.container_name, str) or not self.container_name.strip():
            raise ConfigurationError("container_name is required")
        if (
            not isinstance(self.reference_property_name, str)
            or not self.reference_property_name.strip()
        ):
            raise ConfigurationError("reference_property_name is required")
        if not callable(self.size_exceeds_threshold):
            raise ConfigurationError("size_exceeds_threshold must be callable")
        if not callable(self.blob_store_factory):
            raise ConfigurationError("blob_store_factory must be callable")


def require_configuration(configuration: AttachmentConfiguration | None) -> AttachmentConfiguration:
    """Reject a missing configuration at hook construction time."""
    if configuration is None:
        raise ConfigurationError("configuration is required")
    if not isinstance(configuration, AttachmentConfiguration):
        raise ConfigurationError(
            f"expected AttachmentConfiguration, got {type(configuration).__name__}"
        )
    return configuration


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLAIMCHECK_", env_file=".env", extra="ignore", populate_by_name=True
    )

    # Claim-check protocol
    container_name: str = "attachments"
    reference_property_name: str = DEFAULT_REFERENCE_PROPERTY
    offload_threshold_bytes: int = Field(default=DEFAULT_THRESHOLD_BYTES, ge=0)

    # Blob Storage
    blob_storage_type: str = "memory"  # memory, local, azure, s3
    blob_storage_path: str = "/var/lib/claimcheck/blobs"

    # Azure Blob Storage (when blob_storage_type="azure")
    azure_connection_string: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "CLAIMCHECK_AZURE_CONNECTION_STRING", "AZURE_STORAGE_CONNECTION_STRING"
        ),
    )
    azure_account_url: str | None = None
    azure_account_key: str | None = None
    azure_sas_token: str | None = None

    # S3 Blob Storage (when blob_storage_type="s3")
    s3_endpoint_url: str | None = None
    s3_region: str = "us-east-1"
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None

    # Observability
    log_level: str = "INFO"
    log_json: bool = False

    def connection_parameters(self) -> str:
        """Backend-specific connection value handed to the store factory."""
        storage_type = self.blob_storage_type.lower()
        if storage_type == "azure":
            return self.azure_connection_string or self.azure_account_url or ""
        if storage_type in {"s3", "minio"}:
            return self.s3_endpoint_url or ""
        if storage_type == "local":
            return self.blob_storage_path
        return ""

    def to_configuration(
        self, size_exceeds_threshold: ThresholdPredicate | None = None
    ) -> AttachmentConfiguration:
        """Build the claim-check configuration described by these settings."""
        from claimcheck.storage.factory import blob_store_factory

        try:
            factory = blob_store_factory(self)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        return AttachmentConfiguration(
            connection_parameters=self.connection_parameters(),
            container_name=self.container_name,
            reference_property_name=self.reference_property_name,
            size_exceeds_threshold=size_exceeds_threshold
            or body_size_exceeds(self.offload_threshold_bytes),
            blob_store_factory=factory,
        )


def get_settings() -> Settings:
    return Settings()

