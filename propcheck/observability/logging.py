"""Structured logging for propcheck.

propcheck modules log through the standard ``logging.getLogger(__name__)``
loggers under the ``propcheck`` tree. This module configures how those
records are rendered:

- JSON lines for machine consumption (``PROPCHECK_JSON_LOGS=true``)
- Human-readable colored lines for development
- Context fields bound with ``log_context`` and attached to every record

Example:
    Basic setup::

        from propcheck.observability.logging import configure_logging

        configure_logging(level="DEBUG")

    With context::

        with log_context(property="sorted_is_idempotent", seed=1234):
            logger.info("Run started")  # Includes property and seed
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER = "propcheck"
JSON_LOGS_ENV_VAR = "PROPCHECK_JSON_LOGS"

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar("propcheck_log_context", default=None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Attributes:
        include_timestamp: Whether to include timestamp in output.
        include_level: Whether to include log level in output.
        include_logger: Whether to include logger name in output.
        include_location: Whether to include file/line/function in output.
        extra_fields: Additional fields to include in every log record.

    Example:
        >>> formatter = StructuredFormatter(include_location=True)
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON object."""
        log_data: dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        if self.include_level:
            log_data["level"] = record.levelname.lower()
            log_data["level_num"] = record.levelno

        log_data["message"] = record.getMessage()

        if self.include_logger:
            log_data["logger"] = record.name

        if self.include_location:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
                "module": record.module,
            }

        context = _context_fields.get()
        if context:
            log_data["context"] = dict(context)

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in self.extra_fields.items():
            if key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Example:
        >>> formatter = HumanReadableFormatter(use_colors=False)
        >>> handler.setFormatter(formatter)
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream: TextIO | None = None) -> None:
        super().__init__()
        self.use_colors = use_colors and self._supports_color(stream or sys.stderr)

    @staticmethod
    def _supports_color(stream: TextIO) -> bool:
        """Check if the stream is a terminal that supports colors."""
        if sys.platform == "win32":
            return os.environ.get("ANSICON") is not None or "WT_SESSION" in os.environ
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            level = f"{color}{record.levelname:8}{self.RESET}"
        else:
            level = f"{record.levelname:8}"

        base = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        context = _context_fields.get()
        if context:
            base += f" | context={json.dumps(dict(context), default=str)}"

        if record.exc_info:
            base += f"\n{self.formatException(record.exc_info)}"

        return base


def json_logs_enabled() -> bool:
    """Whether ``PROPCHECK_JSON_LOGS`` requests JSON output."""
    return os.environ.get(JSON_LOGS_ENV_VAR, "false").lower() in ("true", "1", "yes")


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool | None = None,
    include_location: bool = False,
    extra_fields: dict[str, Any] | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the ``propcheck`` logger tree.

    Args:
        level: Minimum log level (int or string like 'INFO', 'DEBUG').
        json_format: Use JSON output. If None, uses PROPCHECK_JSON_LOGS.
        include_location: Include file/line/function in JSON output.
        extra_fields: Static fields to include in every JSON record.
        stream: Output stream (defaults to sys.stderr).

    Returns:
        The configured ``propcheck`` logger.

    Example:
        >>> configure_logging(level="DEBUG", json_format=True)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if json_format is None:
        json_format = json_logs_enabled()

    output_stream = stream or sys.stderr

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.handlers.clear()
    root_logger.propagate = False

    handler = logging.StreamHandler(output_stream)
    handler.setLevel(level)

    formatter: logging.Formatter
    if json_format:
        formatter = StructuredFormatter(
            include_location=include_location,
            extra_fields=extra_fields,
        )
    else:
        formatter = HumanReadableFormatter(stream=output_stream)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to every log record emitted inside the block.

    The previous context is restored on exit, so contexts nest.

    Example:
        >>> with log_context(property="reverse_twice", seed=7):
        ...     logger.info("Run started")  # Includes both fields
        >>> logger.info("Done")  # Does not include the fields
    """
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)

