"""Logging setup for propcheck."""

from propcheck.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    json_logs_enabled,
    log_context,
)

__all__ = [
    "StructuredFormatter",
    "HumanReadableFormatter",
    "configure_logging",
    "json_logs_enabled",
    "log_context",
]
