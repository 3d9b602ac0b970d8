"""Property runner and its results."""

from propcheck.runner.result import PropertyFailure, RunStats, format_hex_bytes
from propcheck.runner.runner import (
    PropertyRunner,
    assert_property,
    derive_seed,
    replay,
    verify,
)

__all__ = [
    "PropertyFailure",
    "RunStats",
    "format_hex_bytes",
    "PropertyRunner",
    "assert_property",
    "derive_seed",
    "replay",
    "verify",
]
