"""CLI commands for claimcheck.

Provides command-line interface using Typer:
- claimcheck offload: Run the pre-send hook on a file's contents
- claimcheck fetch: Restore a payload from its blob reference
- claimcheck inspect: Show stored length and metadata of an attachment

Usage:
    claimcheck --help
    claimcheck offload payload.bin --ttl 3600 --message-id order-42
    claimcheck fetch 6f1c0e0a-... --output payload.bin
    claimcheck inspect 6f1c0e0a-...
"""

import typer

from claimcheck.cli.fetch_cmd import fetch
from claimcheck.cli.inspect_cmd import inspect_blob
from claimcheck.cli.offload_cmd import offload

# Main CLI application
app = typer.Typer(
    name="claimcheck",
    help="claimcheck: offload large message bodies to blob storage",
    no_args_is_help=True,
)

# Add subcommands
app.command(name="offload", help="Offload a payload file to blob storage")(offload)
app.command(name="fetch", help="Restore an offloaded payload")(fetch)
app.command(name="inspect", help="Show stored attributes of an attachment")(inspect_blob)


@app.callback()
def callback() -> None:
    """claimcheck: offload large message bodies to blob storage."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
