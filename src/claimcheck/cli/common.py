"""Shared setup for CLI commands."""

from __future__ import annotations

import typer

from claimcheck.config import Settings
from claimcheck.errors import ConfigurationError
from claimcheck.observability.logging import configure_logging
from claimcheck.pipeline import ClaimCheck, create_claim_check


def load_claim_check(force: bool = False) -> ClaimCheck:
    """Build a claim-check pair from environment settings.

    Args:
        force: Offload every message regardless of size
    """
    settings = Settings()
    configure_logging(json_format=settings.log_json, level=settings.log_level)

    if settings.blob_storage_type.lower() == "memory":
        typer.echo(
            "Configuration error: blob_storage_type 'memory' does not persist between "
            "commands; set CLAIMCHECK_BLOB_STORAGE_TYPE to local, azure, s3 or minio",
            err=True,
        )
        raise typer.Exit(2)

    try:
        if force:
            from claimcheck.criteria import always

            configuration = settings.to_configuration(always())
        else:
            configuration = settings.to_configuration()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(2) from e

    return create_claim_check(configuration)
