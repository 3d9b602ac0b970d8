"""Run configuration and loading.

An AssertConfig controls one run of a property: how many trials, which
byte source, how verbose, and how far to shrink. It can be built
directly, read from ``PROPCHECK_*`` environment variables, or loaded
from a YAML file with named profiles:

    # propcheck.yaml
    runs: 200
    profiles:
      ci:
        runs: 2000
      debug:
        runs: 10
        verbose: true

Priority: explicit overrides > env vars > profile > config file > defaults
"""

from __future__ import annotations

import builtins
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from propcheck.errors import ConfigLoadError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "propcheck.yaml"
PROFILE_ENV_VAR = "PROPCHECK_PROFILE"


def parse_hex_bytes(text: str) -> builtins.bytes:
    """Parse a replay buffer written as hex.

    Accepts plain hex (``"0a1b"``), whitespace or comma separated bytes,
    and ``0x`` prefixes, so the output of
    ``PropertyFailure.format_replay_bytes()`` can be pasted back in.
    """
    cleaned = text
    for comment_line in [line for line in text.splitlines() if line.strip().startswith("#")]:
        cleaned = cleaned.replace(comment_line, "")
    for token in ("[", "]", "(", ")", ","):
        cleaned = cleaned.replace(token, " ")
    parts = []
    for part in cleaned.split():
        part = part.lower()
        if part.startswith("0x"):
            part = part[2:]
            if len(part) == 1:
                part = "0" + part
        parts.append(part)
    try:
        return builtins.bytes.fromhex("".join(parts))
    except ValueError as e:
        raise ConfigurationError(f"Invalid hex replay buffer: {text!r}", cause=e) from e


class AssertConfig(BaseSettings):
    """Configuration for a single property run.

    Exactly one of ``bytes`` and a seed drives the byte source: a fixed
    replay buffer when ``bytes`` is set, otherwise a pseudo-random stream
    seeded by ``seed`` (or by a freshly derived seed that is recorded in
    the result).

    Attributes:
        runs: Number of trials to attempt.
        bytes: Fixed replay buffer; trials consume it in order.
        seed: Seed of the pseudo-random stream.
        verbose: Emit one human-readable line per trial and shrink step.
        max_shrinks: Upper bound on accepted shrink steps.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROPCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    runs: int = Field(default=100, gt=0)
    bytes: builtins.bytes | None = None
    seed: int | None = Field(default=None, ge=0)
    verbose: bool = False
    max_shrinks: int = Field(default=1000, ge=0)

    @field_validator("bytes", mode="before")
    @classmethod
    def validate_bytes(cls, v: Any) -> Any:
        if v is None or isinstance(v, builtins.bytes):
            return v
        if isinstance(v, bytearray):
            return builtins.bytes(v)
        if isinstance(v, str):
            return parse_hex_bytes(v)
        if isinstance(v, (list, tuple)):
            return builtins.bytes(v)
        return v

    @model_validator(mode="after")
    def validate_source(self) -> AssertConfig:
        if self.bytes is not None and self.seed is not None:
            raise ValueError("Set either bytes or seed, not both")
        return self


def load_config(
    config_path: str | Path | None = None,
    profile: str | None = None,
    **overrides: Any,
) -> AssertConfig:
    """Load configuration from file, profile, environment and overrides.

    Args:
        config_path: YAML file to read. Defaults to ``propcheck.yaml`` in
            the working directory when it exists.
        profile: Name of a profile under the file's ``profiles`` key.
            Defaults to ``$PROPCHECK_PROFILE``, then the file's
            ``profile`` key.
        **overrides: Explicit values; ``None`` values are ignored.

    Raises:
        ConfigLoadError: If the file cannot be read or the profile is unknown.
        ConfigurationError: If the merged values are invalid.
    """
    config_data: dict[str, Any] = {}

    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_FILE)
    if path.exists():
        config_data = _load_from_file(path)
    elif config_path is not None:
        raise ConfigLoadError(f"Configuration file not found: {path}", path=str(path))

    profiles = config_data.pop("profiles", None) or {}
    file_profile = config_data.pop("profile", None)
    active_profile = profile or os.environ.get(PROFILE_ENV_VAR) or file_profile
    if active_profile:
        if active_profile not in profiles:
            raise ConfigLoadError(
                f"Unknown profile '{active_profile}'. Available: {sorted(profiles)}",
                profile=active_profile,
            )
        logger.debug(f"Using configuration profile '{active_profile}'")
        config_data.update(profiles[active_profile] or {})

    config_data.update(_get_env_overrides())
    config_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AssertConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e


def _load_from_file(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            f"Failed to parse YAML configuration: {e}",
            cause=e,
            path=str(path),
        ) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigLoadError(
            f"Configuration must be a YAML mapping, got {type(config).__name__}",
            path=str(path),
        )
    return config


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "PROPCHECK_RUNS": ("runs", int),
        "PROPCHECK_SEED": ("seed", int),
        "PROPCHECK_BYTES": ("bytes", parse_hex_bytes),
        "PROPCHECK_MAX_SHRINKS": ("max_shrinks", int),
        "PROPCHECK_VERBOSE": ("verbose", lambda x: x.lower() in ("true", "1", "yes")),
    }

    for env_key, (key, converter) in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            try:
                overrides[key] = converter(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_key}: {value!r}", cause=e
                ) from e

    return overrides
