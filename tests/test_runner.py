"""Tests for the property runner: sampling, shrinking and replay."""

from __future__ import annotations

import io
import logging

import pytest

from propcheck.config import AssertConfig
from propcheck.core import Property, integers, integers_of_width, tuples
from propcheck.errors import ConfigurationError, GeneratorExhaustedError, PropertyFailedError
from propcheck.reporters import ConsoleReporter
from propcheck.runner import (
    PropertyFailure,
    PropertyRunner,
    assert_property,
    format_hex_bytes,
    replay,
    verify,
)


# =============================================================================
# Pass and fail
# =============================================================================


class TestOutcomes:
    """Tests for the pass and fail results."""

    def test_always_true_passes(self) -> None:
        prop = Property(integers_of_width(16), lambda v: -32768 <= v <= 32767, name="in_i16")
        runner = PropertyRunner(AssertConfig(runs=50))

        assert runner.run(prop) is None
        assert runner.last_stats.trials == 50
        assert runner.last_stats.passed == 50

    def test_bounded_range_always_true_passes(self, always_true: Property[int]) -> None:
        assert assert_property(always_true, runs=50) is None

    def test_odd_integers_are_found(self) -> None:
        prop = Property(integers_of_width(32), lambda v: v % 2 == 0, name="is_even")
        failure = assert_property(prop, runs=1000)

        assert failure is not None
        assert failure.original % 2 == 1
        assert failure.minimized % 2 == 1
        assert abs(failure.minimized) <= abs(failure.original)

    def test_false_on_known_fraction_of_domain_fails(self) -> None:
        prop = Property(integers(0, 1000), lambda v: v >= 100, name="at_least_100")
        assert assert_property(prop, runs=1000, seed=8) is not None

    def test_stops_on_first_failure(self) -> None:
        prop = Property(integers(0, 100), lambda v: False, name="never")
        runner = PropertyRunner(AssertConfig(runs=100, seed=1))
        failure = runner.run(prop)

        assert failure.trial == 0
        assert failure.num_passed == 0
        assert runner.last_stats.trials == 1


# =============================================================================
# Shrinking
# =============================================================================


class TestShrinking:
    """Tests for the shrink search."""

    def test_shrinks_to_boundary(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, runs=1000, seed=2024)

        assert failure is not None
        assert failure.minimized == 10
        assert failure.original >= 10

    def test_shrinks_to_boundary_for_any_seed(self, below_ten: Property[int]) -> None:
        for seed in range(20):
            assert assert_property(below_ten, runs=1000, seed=seed).minimized == 10

    def test_tuple_shrinks_each_component(self) -> None:
        prop = Property(
            tuples(integers(0, 1000), integers(0, 1000)),
            lambda pair: pair[0] < 10 or pair[1] < 20,
            name="pair",
        )
        failure = assert_property(prop, runs=1000, seed=3)

        assert failure.minimized == (10, 20)

    def test_assertion_message_of_minimized_value_is_kept(self) -> None:
        def small(v: int) -> None:
            assert v < 10, f"got {v}"

        failure = assert_property(Property(integers(0, 100), small), runs=1000, seed=1)

        assert failure.error == "got 10"

    def test_shrinking_disabled(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, runs=1000, seed=5, max_shrinks=0)

        assert failure.shrink_steps == 0
        assert failure.minimized == failure.original

    def test_shrink_budget_is_enforced(self, caplog: pytest.LogCaptureFixture) -> None:
        prop = Property(integers(0, 10**9), lambda v: v < 10, name="tiny")

        with caplog.at_level(logging.WARNING, logger="propcheck"):
            failure = assert_property(prop, runs=100, seed=9, max_shrinks=2)

        assert failure.shrink_steps == 2
        assert "Shrink budget" in caplog.text

    def test_hooks_wrap_trials_and_shrink_candidates(self, below_ten: Property[int]) -> None:
        counter = {"before": 0, "after": 0}

        def before() -> None:
            counter["before"] += 1

        def after() -> None:
            counter["after"] += 1

        runner = PropertyRunner(AssertConfig(runs=1000, seed=6))
        runner.run(below_ten.with_hooks(before_each=before, after_each=after))

        expected = runner.last_stats.trials + runner.last_stats.shrink_candidates
        assert counter == {"before": expected, "after": expected}


# =============================================================================
# Replay
# =============================================================================


class TestReplay:
    """Tests for reproducing failures."""

    def test_replay_bytes_reproduce_original(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, runs=1000, seed=77)
        again = assert_property(below_ten, bytes=failure.replay_bytes, runs=1)

        assert again is not None
        assert again.original == failure.original
        assert again.minimized == failure.minimized

    def test_replay_helper(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, runs=1000, seed=78)
        assert replay(below_ten, failure.replay_bytes).original == failure.original

    def test_replay_ignores_seed_from_environment(
        self, below_ten: Property[int], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        failure = assert_property(below_ten, runs=1000, seed=77)
        monkeypatch.setenv("PROPCHECK_SEED", "7")

        again = assert_property(below_ten, bytes=failure.replay_bytes, runs=1)

        assert again.seed is None
        assert again.original == failure.original
        assert replay(below_ten, failure.replay_bytes).original == failure.original

    def test_bytes_override_replaces_seeded_config(self, below_ten: Property[int]) -> None:
        config = AssertConfig(seed=5, runs=1000)
        failure = assert_property(below_ten, config)

        again = assert_property(below_ten, config, bytes=failure.replay_bytes, runs=1)

        assert again.original == failure.original

    def test_seed_override_replaces_fixed_config(self, below_ten: Property[int]) -> None:
        config = AssertConfig(bytes=b"\x32", runs=1000)

        failure = assert_property(below_ten, config, seed=5)

        assert failure.seed == 5

    def test_seed_reproduces_original(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, runs=1000)
        again = assert_property(below_ten, runs=1000, seed=failure.seed)

        assert again.original == failure.original
        assert again.trial == failure.trial

    def test_derived_seed_is_recorded(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, runs=1000)
        assert failure.seed is not None
        assert 0 <= failure.seed < 2**64

    def test_fixed_buffer_run_records_no_seed(self, below_ten: Property[int]) -> None:
        failure = assert_property(below_ten, bytes=b"\x32", runs=1)
        assert failure.seed is None
        assert failure.original == 50

    def test_replay_bytes_are_exact_for_tuples(self) -> None:
        prop = Property(tuples(integers(0, 255), integers(0, 255)), lambda p: p[0] < p[1], name="ordered")
        failure = assert_property(prop, bytes=b"\x01\x05\x09\x02", runs=10)

        assert failure.trial == 1
        assert failure.original == (9, 2)
        assert failure.replay_bytes == b"\x09\x02"


# =============================================================================
# Fixed buffers
# =============================================================================


class TestFixedBuffer:
    """Tests for runs driven by a caller-supplied buffer."""

    def test_trials_stop_when_buffer_is_exhausted(self, always_true: Property[int]) -> None:
        runner = PropertyRunner(AssertConfig(bytes=b"\x01\x02\x03", runs=100))

        assert runner.run(always_true) is None
        assert runner.last_stats.trials == 3

    def test_empty_buffer_runs_one_trial(self, always_true: Property[int]) -> None:
        runner = PropertyRunner(AssertConfig(bytes=b"", runs=100))

        assert runner.run(always_true) is None
        assert runner.last_stats.trials == 1


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    """Tests for errors that are not property failures."""

    def test_generator_exhaustion_propagates(self) -> None:
        prop = Property(integers(0, 10).filter(lambda n: False), lambda v: True, name="never_drawn")

        with pytest.raises(GeneratorExhaustedError) as exc_info:
            assert_property(prop, seed=4)

        assert exc_info.value.context.property_name == "never_drawn"
        assert exc_info.value.context.seed == 4

    def test_predicate_exceptions_propagate(self) -> None:
        prop = Property(integers(0, 0), lambda v: 1 / v, name="divide")
        with pytest.raises(ZeroDivisionError):
            assert_property(prop, seed=1)

    def test_verify_raises_property_failed(self, below_ten: Property[int]) -> None:
        with pytest.raises(PropertyFailedError) as exc_info:
            verify(below_ten, runs=1000, seed=10)

        assert exc_info.value.failure.minimized == 10
        assert "below_ten" in str(exc_info.value)

    def test_verify_failure_is_assertion_error(self, below_ten: Property[int]) -> None:
        with pytest.raises(AssertionError):
            verify(below_ten, runs=1000, seed=10)

    def test_verify_passes_silently(self, always_true: Property[int]) -> None:
        assert verify(always_true, runs=20) is None

    def test_invalid_override_is_configuration_error(self, below_ten: Property[int]) -> None:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            assert_property(below_ten, runs=0)

    def test_invalid_environment_is_configuration_error(
        self, below_ten: Property[int], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PROPCHECK_RUNS", "0")

        with pytest.raises(ConfigurationError):
            assert_property(below_ten)

    def test_overrides_merge_into_config(self, below_ten: Property[int]) -> None:
        base = AssertConfig(runs=1, max_shrinks=0)
        failure = assert_property(below_ten, base, bytes=b"\x50")

        assert failure.original == 80
        assert failure.shrink_steps == 0


# =============================================================================
# Verbose output and results
# =============================================================================


class TestVerboseOutput:
    """Tests for per-trial and per-shrink reporting."""

    def test_trial_lines_when_verbose(
        self,
        always_true: Property[int],
        plain_reporter: ConsoleReporter,
        report_buffer: io.StringIO,
    ) -> None:
        PropertyRunner(AssertConfig(runs=3, seed=1, verbose=True), reporter=plain_reporter).run(always_true)
        output = report_buffer.getvalue()

        assert "trial 0" in output
        assert "trial 2" in output
        assert "always_true passed" in output

    def test_no_trial_lines_when_quiet(
        self,
        always_true: Property[int],
        plain_reporter: ConsoleReporter,
        report_buffer: io.StringIO,
    ) -> None:
        PropertyRunner(AssertConfig(runs=3, seed=1), reporter=plain_reporter).run(always_true)
        assert "trial 0" not in report_buffer.getvalue()

    def test_shrink_lines_when_verbose(
        self,
        below_ten: Property[int],
        plain_reporter: ConsoleReporter,
        report_buffer: io.StringIO,
    ) -> None:
        config = AssertConfig(runs=1000, seed=12, verbose=True)
        failure = PropertyRunner(config, reporter=plain_reporter).run(below_ten)
        output = report_buffer.getvalue()

        if failure.shrink_steps:
            assert "shrink 1:" in output
        assert "FAILED" in output
        assert "Replay bytes" in output


class TestPropertyFailure:
    """Tests for the failure record."""

    def make_failure(self) -> PropertyFailure:
        return PropertyFailure(
            property_name="sample",
            original=57,
            minimized=10,
            shrink_steps=4,
            replay_bytes=bytes(range(10)),
            seed=1234,
            trial=3,
            num_passed=3,
            error="too big",
        )

    def test_format_replay_bytes_groups_eight_per_line(self) -> None:
        assert self.make_failure().format_replay_bytes() == (
            "[\n"
            "    0x00, 0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07,\n"
            "    0x08, 0x09,\n"
            "]"
        )

    def test_format_empty_buffer(self) -> None:
        assert format_hex_bytes(b"") == "[]"

    def test_summary(self) -> None:
        summary = self.make_failure().summary()

        assert "Property 'sample' failed after 3 passing trials" in summary
        assert "Minimized:    10" in summary
        assert "Seed:         1234 (trial 3)" in summary
        assert "bytes=00010203040506070809" in summary

    def test_to_dict(self) -> None:
        data = self.make_failure().to_dict()

        assert data["property"] == "sample"
        assert data["minimized"] == "10"
        assert data["replay_bytes"] == "00010203040506070809"
        assert data["seed"] == 1234
        assert data["error"] == "too big"

    def test_shrunk(self) -> None:
        assert self.make_failure().shrunk is True
