"""Run properties: sample, detect a counterexample, shrink it.

A run draws up to ``runs`` values from the property's generator, all
from one ByteSource. The first value the predicate rejects stops
sampling. It is then shrunk greedily: the first smaller candidate that
still fails is accepted and shrinking restarts from it, until no
candidate fails or the shrink budget runs out.

Example:
    >>> prop = Property(integers(0, 100), lambda n: n < 10, name="small")
    >>> failure = assert_property(prop, seed=1234)
    >>> failure.minimized
    10
    >>> assert_property(prop, bytes=failure.replay_bytes, runs=1).original == failure.original
    True
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any

from pydantic import ValidationError

from propcheck.config import AssertConfig
from propcheck.core.bytesource import ByteSource
from propcheck.core.generator import Sample
from propcheck.core.property import Property, Verdict
from propcheck.errors import ConfigurationError, ErrorContext, PropcheckError, PropertyFailedError
from propcheck.observability.logging import log_context
from propcheck.reporters.console import ConsoleReporter
from propcheck.runner.result import PropertyFailure, RunStats

logger = logging.getLogger(__name__)

SEED_BITS = 64


def derive_seed() -> int:
    """Fresh 64-bit seed for a run that was not given one."""
    return secrets.randbits(SEED_BITS)


class PropertyRunner:
    """Runs properties under one configuration.

    Attributes:
        config: The run configuration.
        reporter: Receives per-trial and per-shrink lines when the
            configuration is verbose, and the final outcome.
        last_stats: Counters of the most recent run.
    """

    def __init__(
        self,
        config: AssertConfig | None = None,
        reporter: ConsoleReporter | None = None,
    ) -> None:
        self.config = _build_config(config, {})
        if reporter is None and self.config.verbose:
            reporter = ConsoleReporter()
        self.reporter = reporter
        self.last_stats: RunStats | None = None

    def _make_source(self) -> ByteSource:
        if self.config.bytes is not None:
            return ByteSource.from_bytes(self.config.bytes)
        seed = self.config.seed if self.config.seed is not None else derive_seed()
        return ByteSource.from_seed(seed)

    def run(self, prop: Property[Any]) -> PropertyFailure | None:
        """Run ``prop`` and return its shrunk counterexample, or None.

        A failing predicate is reported as a returned PropertyFailure,
        never raised. Configuration and generator exhaustion errors
        propagate with the property name and seed added to their context.
        """
        source = self._make_source()
        stats = RunStats(property_name=prop.name, seed=source.seed)
        started = time.perf_counter()

        with log_context(property=prop.name, seed=source.seed):
            if source.is_fixed:
                logger.info(
                    f"Running '{prop.name}' against a fixed buffer of "
                    f"{len(self.config.bytes or b'')} bytes"
                )
            else:
                logger.info(
                    f"Running '{prop.name}' for up to {self.config.runs} trials "
                    f"(seed {source.seed})"
                )

            try:
                failure = self._search(prop, source, stats, started)
            except PropcheckError as e:
                if e.context.property_name is None:
                    e.context.property_name = prop.name
                if e.context.seed is None:
                    e.context.seed = source.seed
                logger.error(f"Run of '{prop.name}' aborted: {e.message}")
                raise
            finally:
                stats.bytes_consumed = source.position
                stats.duration_ms = (time.perf_counter() - started) * 1000
                self.last_stats = stats

            if failure is None:
                logger.info(
                    f"'{prop.name}' passed {stats.passed} trials in {stats.duration_ms:.1f}ms"
                )
                if self.reporter is not None:
                    self.reporter.passed(stats)
            else:
                failure.duration_ms = stats.duration_ms
                logger.info(
                    f"'{prop.name}' failed: minimized to {failure.minimized!r} "
                    f"in {failure.shrink_steps} steps"
                )
                if self.reporter is not None:
                    self.reporter.failed(failure)

            logger.debug(f"Run stats: {stats.to_dict()}")

        return failure

    def _search(
        self,
        prop: Property[Any],
        source: ByteSource,
        stats: RunStats,
        started: float,
    ) -> PropertyFailure | None:
        verbose = self.config.verbose and self.reporter is not None

        for trial in range(self.config.runs):
            if source.is_fixed and trial > 0 and source.exhausted:
                logger.debug(f"Fixed buffer exhausted after {trial} trials")
                break

            begin = source.position
            sample = prop.generator.draw(source)
            verdict = prop.evaluate(sample.value)
            stats.trials += 1
            logger.debug(f"Trial {trial}: {sample.value!r} -> {'pass' if verdict.holds else 'fail'}")
            if verbose:
                self.reporter.trial(trial, sample.value, verdict.holds)

            if verdict.holds:
                stats.passed += 1
                continue

            replay_bytes = source.consumed(begin, source.position)
            logger.info(f"Counterexample on trial {trial}: {sample.value!r}")
            minimized, message = self._shrink(prop, sample, verdict, stats)

            return PropertyFailure(
                property_name=prop.name,
                original=sample.value,
                minimized=minimized.value,
                shrink_steps=stats.shrink_steps,
                replay_bytes=replay_bytes,
                seed=source.seed,
                trial=trial,
                num_passed=stats.passed,
                duration_ms=(time.perf_counter() - started) * 1000,
                error=message,
            )

        return None

    def _shrink(
        self,
        prop: Property[Any],
        sample: Sample[Any],
        verdict: Verdict,
        stats: RunStats,
    ) -> tuple[Sample[Any], str]:
        """Greedily shrink a failing sample.

        Returns:
            The smallest failing sample found and its assertion message.
        """
        max_shrinks = self.config.max_shrinks
        verbose = self.config.verbose and self.reporter is not None
        current, message = sample, verdict.message

        if max_shrinks == 0:
            logger.debug("Shrinking disabled")
            return current, message

        while stats.shrink_steps < max_shrinks:
            for candidate in prop.generator.shrink(current):
                stats.shrink_candidates += 1
                outcome = prop.evaluate(candidate.value)
                if not outcome.holds:
                    current, message = candidate, outcome.message
                    stats.shrink_steps += 1
                    logger.debug(f"Shrink step {stats.shrink_steps}: {candidate.value!r}")
                    if verbose:
                        self.reporter.shrink_step(stats.shrink_steps, candidate.value)
                    break
            else:
                return current, message

        logger.warning(
            f"Shrink budget of {max_shrinks} steps exhausted for '{prop.name}'; "
            f"the counterexample may not be minimal"
        )
        return current, message


def _build_config(config: AssertConfig | None, overrides: dict[str, Any]) -> AssertConfig:
    """Merge keyword overrides over ``config`` (or over defaults and env).

    An explicit ``bytes`` override clears any seed and vice versa, so a
    replay is never rejected because of ``PROPCHECK_SEED`` or a seeded config.
    """
    if not overrides and config is not None:
        return config

    values = config.model_dump() if config is not None else {}
    values.update(overrides)
    if overrides.get("bytes") is not None:
        values["seed"] = None
    elif overrides.get("seed") is not None:
        values["bytes"] = None

    try:
        return AssertConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e


def assert_property(
    prop: Property[Any],
    config: AssertConfig | None = None,
    reporter: ConsoleReporter | None = None,
    **overrides: Any,
) -> PropertyFailure | None:
    """Run a property and return its shrunk counterexample, or None if it held.

    Args:
        prop: The property to check.
        config: Run configuration. Defaults to ``AssertConfig()``, which
            also reads ``PROPCHECK_*`` environment variables.
        reporter: Optional reporter for verbose output.
        **overrides: Individual config fields, e.g. ``runs=500``.

    Raises:
        ConfigurationError: If the configuration or a generator is invalid.
        GeneratorExhaustedError: If a filter rejected too many candidates.
    """
    return PropertyRunner(_build_config(config, overrides), reporter=reporter).run(prop)


def replay(
    prop: Property[Any],
    replay_bytes: bytes,
    reporter: ConsoleReporter | None = None,
    verbose: bool = False,
) -> PropertyFailure | None:
    """Run ``prop`` once against a recorded replay buffer."""
    config = _build_config(None, {"bytes": replay_bytes, "runs": 1, "verbose": verbose})
    return PropertyRunner(config, reporter=reporter).run(prop)


def verify(
    prop: Property[Any],
    config: AssertConfig | None = None,
    **overrides: Any,
) -> None:
    """Run a property and raise if it has a counterexample.

    Intended for use inside test functions:

        def test_sort_is_idempotent():
            verify(Property(lists(integers()), lambda xs: sorted(sorted(xs)) == sorted(xs)))

    Raises:
        PropertyFailedError: With the PropertyFailure attached as ``.failure``.
    """
    failure = assert_property(prop, config, **overrides)
    if failure is not None:
        raise PropertyFailedError(
            failure,
            context=ErrorContext(property_name=failure.property_name, seed=failure.seed),
        )
