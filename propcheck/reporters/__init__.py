"""Reporters for property runs."""

from propcheck.reporters.console import ConsoleReporter

__all__ = ["ConsoleReporter"]
