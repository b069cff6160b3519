"""CLI command for offloading a payload file.

Usage:
    claimcheck offload payload.bin
    claimcheck offload payload.bin --ttl 3600 --message-id order-42 --force
"""

from __future__ import annotations

import asyncio
import json
import math
from datetime import timedelta
from pathlib import Path

import typer

from claimcheck.cli.common import load_claim_check
from claimcheck.clock import INFINITE_TTL
from claimcheck.errors import StorageError
from claimcheck.message import Message


def _time_to_live(ttl: float | None) -> timedelta:
    if ttl is None:
        return INFINITE_TTL
    if math.isnan(ttl):
        raise typer.BadParameter("must be a number", param_hint="--ttl")
    try:
        return timedelta(seconds=ttl)
    except OverflowError:
        # Beyond what timedelta can hold; treat as no expiry
        return INFINITE_TTL


def offload(
    path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="File whose contents form the message body",
    ),
    message_id: str | None = typer.Option(
        None,
        "--message-id",
        "-m",
        help="Message id recorded on the blob",
    ),
    ttl: float | None = typer.Option(
        None,
        "--ttl",
        min=0,
        help="Time-to-live in seconds (omit for no expiry)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Offload even when the body is below the threshold",
    ),
) -> None:
    """Run the pre-send hook on a file and print the resulting message properties."""
    from rich.console import Console

    console = Console(stderr=True)
    claim_check = load_claim_check(force=force)

    message = Message(
        body=path.read_bytes(),
        message_id=message_id,
        time_to_live=_time_to_live(ttl),
    )

    async def run() -> Message:
        try:
            return await claim_check.writer.before_send(message)
        finally:
            await claim_check.close()

    try:
        result = asyncio.run(run())
    except StorageError as e:
        console.print(f"[red]Offload failed:[/red] {e}")
        raise typer.Exit(1) from e

    reference_property = claim_check.writer.configuration.reference_property_name
    if reference_property not in result.properties:
        console.print("[yellow]Body below offload threshold; nothing stored[/yellow]")
    typer.echo(json.dumps(result.properties))
