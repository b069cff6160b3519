"""Observability helpers for claimcheck."""

from claimcheck.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
)

__all__ = ["ConsoleFormatter", "JsonFormatter", "LogContext", "configure_logging"]
