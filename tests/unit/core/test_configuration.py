"""Tests for claim-check configuration and settings."""

from collections.abc import Callable
from pathlib import Path

import pytest

from claimcheck.config import (
    DEFAULT_REFERENCE_PROPERTY,
    AttachmentConfiguration,
    Settings,
    require_configuration,
)
from claimcheck.errors import ConfigurationError
from claimcheck.message import Message
from claimcheck.storage.local import LocalBlobStore
from claimcheck.storage.memory import InMemoryBlobStore


class TestAttachmentConfiguration:
    """Tests for AttachmentConfiguration validation."""

    def test_valid_configuration(
        self, make_configuration: Callable[..., AttachmentConfiguration]
    ) -> None:
        configuration = make_configuration()
        assert configuration.container_name == "attachments"
        assert configuration.reference_property_name == DEFAULT_REFERENCE_PROPERTY

    def test_is_immutable(self, configuration: AttachmentConfiguration) -> None:
        with pytest.raises(AttributeError):
            configuration.container_name = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"container_name": ""},
            {"container_name": "   "},
            {"reference_property_name": ""},
            {"connection_parameters": None},
            {"size_exceeds_threshold": "not callable"},
            {"blob_store_factory": None},
        ],
    )
    def test_invalid_configuration_rejected(
        self,
        make_configuration: Callable[..., AttachmentConfiguration],
        overrides: dict[str, object],
    ) -> None:
        with pytest.raises(ConfigurationError):
            make_configuration(**overrides)

    def test_require_configuration(self, configuration: AttachmentConfiguration) -> None:
        assert require_configuration(configuration) is configuration
        with pytest.raises(ConfigurationError):
            require_configuration(None)
        with pytest.raises(ConfigurationError):
            require_configuration({"container_name": "x"})  # type: ignore[arg-type]


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.blob_storage_type == "memory"
        assert settings.reference_property_name == DEFAULT_REFERENCE_PROPERTY
        assert settings.offload_threshold_bytes == 192 * 1024

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLAIMCHECK_CONTAINER_NAME", "large-payloads")
        monkeypatch.setenv("CLAIMCHECK_OFFLOAD_THRESHOLD_BYTES", "1024")
        settings = Settings()
        assert settings.container_name == "large-payloads"
        assert settings.offload_threshold_bytes == 1024

    def test_azure_connection_string_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")
        assert Settings().azure_connection_string == "UseDevelopmentStorage=true"

    def test_to_configuration_uses_threshold(self) -> None:
        configuration = Settings(offload_threshold_bytes=8).to_configuration()
        assert configuration.size_exceeds_threshold(Message(body=b"x" * 9))
        assert not configuration.size_exceeds_threshold(Message(body=b"x" * 8))

    def test_memory_factory_shares_store(self) -> None:
        configuration = Settings().to_configuration()
        first = configuration.blob_store_factory(configuration.connection_parameters)
        second = configuration.blob_store_factory(configuration.connection_parameters)
        assert isinstance(first, InMemoryBlobStore)
        assert first is second

    def test_local_factory(self, tmp_path: Path) -> None:
        settings = Settings(blob_storage_type="local", blob_storage_path=str(tmp_path))
        configuration = settings.to_configuration()
        store = configuration.blob_store_factory(configuration.connection_parameters)
        assert isinstance(store, LocalBlobStore)
        assert store.base_path == tmp_path

    def test_azure_requires_connection(self) -> None:
        with pytest.raises(ConfigurationError):
            Settings(blob_storage_type="azure").to_configuration()

    def test_unsupported_storage_type(self) -> None:
        with pytest.raises(ConfigurationError):
            Settings(blob_storage_type="ftp").to_configuration()
