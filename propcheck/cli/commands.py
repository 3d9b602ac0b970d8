"""CLI commands for propcheck."""

from __future__ import annotations

import importlib
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from propcheck.config import AssertConfig, load_config, parse_hex_bytes
from propcheck.core.property import Property
from propcheck.errors import PropcheckError
from propcheck.observability.logging import configure_logging
from propcheck.reporters.console import ConsoleReporter
from propcheck.runner import PropertyFailure, PropertyRunner, RunStats, replay as replay_property

logger = logging.getLogger(__name__)

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)


def _split_target(target: str) -> tuple[str, str | None]:
    """Split ``module:name`` or ``path.py:name`` into its parts."""
    location, sep, name = target.rpartition(":")
    if sep and name.isidentifier() and location:
        return location, name
    return target, None


def _import_target(location: str) -> Any:
    path = Path(location)
    if location.endswith(".py") or path.exists():
        if not path.exists():
            raise click.UsageError(f"File not found: {location}")
        module_name = f"_propcheck_target_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise click.UsageError(f"Cannot import {location}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(location)
    except ImportError as e:
        raise click.UsageError(f"Cannot import module '{location}': {e}") from e


def load_properties(target: str) -> dict[str, Property[Any]]:
    """Discover the properties named by a CLI target.

    Args:
        target: ``module``, ``path/to/file.py``, or either followed by
            ``:name`` to select a single property.

    Returns:
        Properties keyed by attribute name, in definition order.
    """
    location, name = _split_target(target)
    module = _import_target(location)

    if name is not None:
        prop = getattr(module, name, None)
        if not isinstance(prop, Property):
            raise click.UsageError(f"'{name}' in {location} is not a Property")
        return {name: prop}

    found = {attr: value for attr, value in vars(module).items() if isinstance(value, Property)}
    if not found:
        raise click.UsageError(f"No properties found in {location}")
    return found


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.option("--profile", "-p", default=None, help="Configuration profile to use")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None, profile: str | None) -> None:
    """propcheck - property-based testing with shrinking."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["profile"] = profile
    ctx.obj["verbose"] = verbose

    setup_logging(verbose)


def _resolve_config(ctx: click.Context, **overrides: Any) -> AssertConfig:
    try:
        return load_config(
            ctx.obj["config_path"],
            profile=ctx.obj["profile"],
            verbose=ctx.obj["verbose"] or None,
            **overrides,
        )
    except PropcheckError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)


@cli.command()
@click.argument("target")
@click.option("--runs", "-n", type=int, default=None, help="Number of trials per property")
@click.option("--seed", "-s", type=int, default=None, help="Seed of the byte stream")
@click.option("--bytes", "replay_hex", default=None, help="Fixed replay buffer as hex")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def run(
    ctx: click.Context,
    target: str,
    runs: int | None,
    seed: int | None,
    replay_hex: str | None,
    output_format: str,
) -> None:
    """Run every property found in TARGET.

    TARGET is a module or .py file, optionally followed by :name.
    """
    properties = load_properties(target)
    config = _resolve_config(ctx, runs=runs, seed=seed, bytes=replay_hex)

    reporter = None
    if output_format == "text":
        reporter = ConsoleReporter(file=sys.stdout, color=sys.stdout.isatty())
        click.echo(f"Running {len(properties)} propert{'y' if len(properties) == 1 else 'ies'}...")

    results: list[tuple[RunStats, PropertyFailure | None]] = []
    for name, prop in properties.items():
        runner = PropertyRunner(config, reporter=reporter)
        try:
            failure = runner.run(prop)
        except PropcheckError as e:
            click.echo(e.format_verbose(), err=True)
            sys.exit(EXIT_ERROR)
        assert runner.last_stats is not None
        results.append((runner.last_stats, failure))

    all_passed = all(failure is None for _, failure in results)

    if output_format == "json":
        click.echo(json.dumps(
            {
                "passed": all_passed,
                "results": [
                    {
                        **stats.to_dict(),
                        "failure": failure.to_dict() if failure else None,
                    }
                    for stats, failure in results
                ],
            },
            indent=2,
        ))
    else:
        _print_summary(results)

    sys.exit(EXIT_PASSED if all_passed else EXIT_FAILED)


@cli.command()
@click.argument("target")
@click.argument("replay_hex")
@click.pass_context
def replay(ctx: click.Context, target: str, replay_hex: str) -> None:
    """Run one property from TARGET once against a hex replay buffer."""
    properties = load_properties(target)
    if len(properties) != 1:
        raise click.UsageError(
            f"{target} holds {len(properties)} properties; select one with {target}:name"
        )
    prop = next(iter(properties.values()))

    try:
        data = parse_hex_bytes(replay_hex)
        reporter = ConsoleReporter(file=sys.stdout, color=sys.stdout.isatty())
        failure = replay_property(prop, data, reporter=reporter, verbose=ctx.obj["verbose"])
    except PropcheckError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_ERROR)

    sys.exit(EXIT_PASSED if failure is None else EXIT_FAILED)


@cli.command("list")
@click.argument("target")
def list_properties(target: str) -> None:
    """List the properties found in TARGET."""
    properties = load_properties(target)

    table = Table(title="Properties")
    table.add_column("Name", style="cyan")
    table.add_column("Generator")
    for name, prop in properties.items():
        table.add_row(name, prop.generator.label)
    Console().print(table)


def _print_summary(results: list[tuple[RunStats, PropertyFailure | None]]) -> None:
    """Print a summary table of property results."""
    table = Table(title="Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Result")
    table.add_column("Trials", justify="right")
    table.add_column("Shrinks", justify="right")
    table.add_column("Minimized")
    table.add_column("Seed", justify="right")

    for stats, failure in results:
        table.add_row(
            stats.property_name,
            "[green]passed[/green]" if failure is None else "[red]FAILED[/red]",
            str(stats.trials),
            str(stats.shrink_steps),
            repr(failure.minimized) if failure else "",
            str(stats.seed) if stats.seed is not None else "-",
        )

    Console().print(table)

    passed = sum(1 for _, failure in results if failure is None)
    click.echo(f"\n{passed}/{len(results)} properties passed")


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
