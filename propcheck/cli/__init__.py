"""propcheck CLI - command line interface for running properties."""

from propcheck.cli.commands import cli, load_properties


def main() -> None:
    """Main entry point for the propcheck CLI."""
    cli(obj={})


__all__ = ["cli", "load_properties", "main"]
