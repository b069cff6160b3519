"""CLI command for inspecting a stored attachment.

Usage:
    claimcheck inspect 6f1c0e0a-...
    claimcheck inspect 6f1c0e0a-... --format json
"""

from __future__ import annotations

import asyncio
import json

import typer

from claimcheck.cli.common import load_claim_check
from claimcheck.clock import format_valid_until
from claimcheck.errors import StorageError
from claimcheck.reader import AttachmentInfo


def inspect_blob(
    blob_name: str = typer.Argument(..., help="Blob name carried by the reference property"),
    output_format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text, json",
    ),
) -> None:
    """Print length, message id and advisory expiry of an attachment."""
    from rich.console import Console
    from rich.table import Table

    claim_check = load_claim_check()

    async def run() -> AttachmentInfo:
        try:
            return await claim_check.reader.describe(blob_name)
        finally:
            await claim_check.close()

    try:
        info = asyncio.run(run())
    except StorageError as e:
        typer.echo(f"Inspect failed: {e}", err=True)
        raise typer.Exit(1) from e

    expired = info.is_expired(claim_check.reader.now())
    valid_until = format_valid_until(info.valid_until) if info.valid_until else None

    if output_format == "json":
        typer.echo(
            json.dumps(
                {
                    "blob_name": info.blob_name,
                    "length": info.length,
                    "message_id": info.message_id,
                    "valid_until": valid_until,
                    "expired": expired,
                    "metadata": info.metadata,
                }
            )
        )
        return

    table = Table(title=f"Attachment {info.blob_name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Length", str(info.length))
    table.add_row("Message id", info.message_id or "-")
    table.add_row("Valid until", valid_until or "never")
    table.add_row("Expired", "[red]yes[/red]" if expired else "no")
    Console().print(table)
