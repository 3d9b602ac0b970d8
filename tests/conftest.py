"""Pytest fixtures for propcheck tests."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import pytest

from propcheck.core import Property, integers
from propcheck.reporters import ConsoleReporter


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep PROPCHECK_* variables, .env and propcheck.yaml out of every test."""
    for key in (
        "PROPCHECK_RUNS",
        "PROPCHECK_SEED",
        "PROPCHECK_BYTES",
        "PROPCHECK_VERBOSE",
        "PROPCHECK_MAX_SHRINKS",
        "PROPCHECK_PROFILE",
        "PROPCHECK_JSON_LOGS",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_propcheck_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog sees propcheck records."""
    yield
    root = logging.getLogger("propcheck")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture
def below_ten() -> Property[int]:
    """Property over [0, 100] that fails exactly when the value is 10 or more."""
    return Property(integers(0, 100), lambda v: v < 10, name="below_ten")


@pytest.fixture
def always_true() -> Property[int]:
    return Property(integers(0, 100), lambda v: True, name="always_true")


@pytest.fixture
def report_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def plain_reporter(report_buffer: io.StringIO) -> ConsoleReporter:
    """Reporter writing uncolored text into report_buffer."""
    return ConsoleReporter(file=report_buffer, color=False)
