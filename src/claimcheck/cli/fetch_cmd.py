"""CLI command for restoring an offloaded payload.

Usage:
    claimcheck fetch 6f1c0e0a-...
    claimcheck fetch 6f1c0e0a-... --output payload.bin
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer

from claimcheck.cli.common import load_claim_check
from claimcheck.errors import StorageError
from claimcheck.message import Message


def fetch(
    blob_name: str = typer.Argument(..., help="Blob name carried by the reference property"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the payload here instead of stdout",
    ),
) -> None:
    """Run the post-receive hook for a blob reference and emit the restored body."""
    claim_check = load_claim_check()
    reference_property = claim_check.reader.configuration.reference_property_name
    message = Message(properties={reference_property: blob_name})

    async def run() -> Message:
        try:
            return await claim_check.reader.after_receive(message)
        finally:
            await claim_check.close()

    try:
        result = asyncio.run(run())
    except StorageError as e:
        typer.echo(f"Fetch failed: {e}", err=True)
        raise typer.Exit(1) from e

    body = result.body or b""
    if output is not None:
        output.write_bytes(body)
        typer.echo(f"Wrote {len(body)} bytes to {output}", err=True)
    else:
        sys.stdout.buffer.write(body)
        sys.stdout.buffer.flush()
