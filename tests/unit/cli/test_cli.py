"""Tests for the claimcheck CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from claimcheck.cli import app

runner = CliRunner()


def _last_line(output: str) -> str:
    return [line for line in output.splitlines() if line.strip()][-1]


@pytest.fixture
def local_storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    blobs = tmp_path / "blobs"
    monkeypatch.setenv("CLAIMCHECK_BLOB_STORAGE_TYPE", "local")
    monkeypatch.setenv("CLAIMCHECK_BLOB_STORAGE_PATH", str(blobs))
    monkeypatch.setenv("CLAIMCHECK_CONTAINER_NAME", "cli-test")
    monkeypatch.setenv("CLAIMCHECK_OFFLOAD_THRESHOLD_BYTES", "8")
    return blobs


class TestCli:
    """Offload, fetch and inspect against local storage."""

    def test_offload_fetch_inspect(self, tmp_path: Path, local_storage: Path) -> None:
        payload = tmp_path / "payload.bin"
        payload.write_bytes(b"a payload larger than eight bytes")

        result = runner.invoke(
            app, ["offload", str(payload), "--message-id", "order-1", "--ttl", "3600"]
        )
        assert result.exit_code == 0, result.output
        properties = json.loads(_last_line(result.stdout))
        blob_name = properties["$attachment.blob"]
        assert (local_storage / "cli-test" / blob_name).exists()

        restored = tmp_path / "restored.bin"
        result = runner.invoke(app, ["fetch", blob_name, "--output", str(restored)])
        assert result.exit_code == 0, result.output
        assert restored.read_bytes() == payload.read_bytes()

        result = runner.invoke(app, ["inspect", blob_name, "--format", "json"])
        assert result.exit_code == 0, result.output
        info = json.loads(_last_line(result.stdout))
        assert info["length"] == len(payload.read_bytes())
        assert info["message_id"] == "order-1"
        assert info["valid_until"] is not None
        assert info["expired"] is False

    def test_small_payload_not_offloaded(self, tmp_path: Path, local_storage: Path) -> None:
        payload = tmp_path / "small.bin"
        payload.write_bytes(b"tiny")

        result = runner.invoke(app, ["offload", str(payload)])

        assert result.exit_code == 0, result.output
        assert json.loads(_last_line(result.stdout)) == {}

    def test_fetch_missing_blob(self, local_storage: Path) -> None:
        result = runner.invoke(app, ["fetch", "does-not-exist"])
        assert result.exit_code == 1

    def test_invalid_storage_type(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLAIMCHECK_BLOB_STORAGE_TYPE", "ftp")
        result = runner.invoke(app, ["inspect", "anything"])
        assert result.exit_code == 2

    def test_memory_storage_rejected(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLAIMCHECK_BLOB_STORAGE_TYPE", "memory")
        payload = tmp_path / "payload.bin"
        payload.write_bytes(b"a payload larger than eight bytes")

        result = runner.invoke(app, ["offload", str(payload), "--force"])

        assert result.exit_code == 2
        assert "does not persist" in result.output

    @pytest.mark.parametrize("ttl", ["1e20", "inf"])
    def test_huge_ttl_means_no_expiry(
        self, tmp_path: Path, local_storage: Path, ttl: str
    ) -> None:
        payload = tmp_path / "payload.bin"
        payload.write_bytes(b"a payload larger than eight bytes")

        result = runner.invoke(app, ["offload", str(payload), "--ttl", ttl])
        assert result.exit_code == 0, result.output
        blob_name = json.loads(_last_line(result.stdout))["$attachment.blob"]

        result = runner.invoke(app, ["inspect", blob_name, "--format", "json"])
        assert result.exit_code == 0, result.output
        assert json.loads(_last_line(result.stdout))["valid_until"] is None

    def test_negative_ttl_rejected(self, tmp_path: Path, local_storage: Path) -> None:
        payload = tmp_path / "payload.bin"
        payload.write_bytes(b"a payload larger than eight bytes")

        result = runner.invoke(app, ["offload", str(payload), "--ttl", "-5"])

        assert result.exit_code == 2
