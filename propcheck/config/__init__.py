"""Run configuration for propcheck."""

from propcheck.config.settings import (
    DEFAULT_CONFIG_FILE,
    AssertConfig,
    load_config,
    parse_hex_bytes,
)

__all__ = [
    "AssertConfig",
    "DEFAULT_CONFIG_FILE",
    "load_config",
    "parse_hex_bytes",
]
