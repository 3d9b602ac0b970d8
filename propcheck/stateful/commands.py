"""Model-based testing of stateful systems.

A stateful test generates sequences of commands and runs each sequence
against a fresh system under test (SUT) and a fresh model of it. Every
command checks that the SUT still agrees with the model. Because a
sequence is an ordinary list value, a failing sequence shrinks by
dropping commands, down to the shortest sequence that still breaks.

Example:
    >>> class Push(Command):
    ...     name = "push"
    ...     def run(self, model, sut):
    ...         model.append(1)
    ...         sut.push(1)
    ...         return sut.size() == len(model)
    >>> failure = assert_stateful(commands([Push(), Pop()]), list, Stack)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from propcheck.config import AssertConfig
from propcheck.core.generator import Generator, lists
from propcheck.core.property import Property
from propcheck.core.scalars import sampled_from
from propcheck.errors import EmptyChoiceError
from propcheck.reporters.console import ConsoleReporter
from propcheck.runner.result import PropertyFailure
from propcheck.runner.runner import PropertyRunner

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMMANDS = 50


class Command:
    """One operation that can be applied to both a model and a SUT.

    Subclasses set ``name`` and implement ``run``. ``precondition``
    defaults to always applicable and ``apply_model`` to a no-op.
    """

    name: str = "command"

    def precondition(self, model: Any) -> bool:
        """Whether the command may run in the model's current state."""
        return True

    def apply_model(self, model: Any) -> None:
        """Apply the command to the model alone."""

    def run(self, model: Any, sut: Any) -> bool:
        """Apply the command to the model and the SUT.

        Returns:
            False if the SUT diverged from the model.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.name


@dataclass(repr=False, kw_only=True)
class FunctionCommand(Command):
    """A Command assembled from plain functions."""

    name: str
    run_fn: Callable[[Any, Any], bool]
    apply_fn: Callable[[Any], None] | None = None
    precondition_fn: Callable[[Any], bool] | None = None

    def precondition(self, model: Any) -> bool:
        if self.precondition_fn is None:
            return True
        return self.precondition_fn(model)

    def apply_model(self, model: Any) -> None:
        if self.apply_fn is not None:
            self.apply_fn(model)

    def run(self, model: Any, sut: Any) -> bool:
        return self.run_fn(model, sut)


def command(
    name: str,
    run: Callable[[Any, Any], bool],
    apply_model: Callable[[Any], None] | None = None,
    precondition: Callable[[Any], bool] | None = None,
) -> Command:
    """Build a Command from functions instead of subclassing."""
    return FunctionCommand(name=name, run_fn=run, apply_fn=apply_model, precondition_fn=precondition)


def commands(
    cmds: Sequence[Command],
    min_size: int = 1,
    max_size: int = DEFAULT_MAX_COMMANDS,
) -> Generator[list[Command]]:
    """Generator of command sequences drawn from ``cmds``.

    Sequences shrink by deleting commands, then by replacing commands
    with ones earlier in ``cmds``.

    Raises:
        EmptyChoiceError: If ``cmds`` is empty.
        InvalidRangeError: If the size bounds are invalid.
    """
    if not cmds:
        raise EmptyChoiceError("commands() requires at least one command")
    return lists(sampled_from(cmds), min_size=min_size, max_size=max_size)


def model_after(sequence: Sequence[Command], model_factory: Callable[[], Any]) -> Any:
    """Replay a sequence on a fresh model only, honoring preconditions."""
    model = model_factory()
    for cmd in sequence:
        if cmd.precondition(model):
            cmd.apply_model(model)
    return model


def run_sequence(
    sequence: Sequence[Command],
    model_factory: Callable[[], Any],
    sut_factory: Callable[[], Any],
) -> int | None:
    """Run a sequence on a fresh model/SUT pair.

    Commands whose precondition does not hold are skipped.

    Returns:
        Index of the first command where the SUT diverged, or None.
    """
    model = model_factory()
    sut = sut_factory()
    for index, cmd in enumerate(sequence):
        if not cmd.precondition(model):
            logger.debug(f"Skipping {cmd.name}: precondition does not hold")
            continue
        if not cmd.run(model, sut):
            return index
    return None


def stateful_property(
    command_gen: Generator[list[Command]],
    model_factory: Callable[[], Any],
    sut_factory: Callable[[], Any],
    name: str = "stateful",
) -> Property[list[Command]]:
    """Property that every generated sequence keeps the SUT in line with the model."""

    def sut_matches_model(sequence: list[Command]) -> None:
        index = run_sequence(sequence, model_factory, sut_factory)
        if index is not None:
            raise AssertionError(f"SUT diverged from model at command {index} ({sequence[index].name})")

    return Property(generator=command_gen, predicate=sut_matches_model, name=name)


def assert_stateful(
    command_gen: Generator[list[Command]],
    model_factory: Callable[[], Any],
    sut_factory: Callable[[], Any],
    config: AssertConfig | None = None,
    reporter: ConsoleReporter | None = None,
    name: str = "stateful",
) -> PropertyFailure | None:
    """Check a SUT against its model over generated command sequences.

    Args:
        command_gen: Generator of command sequences, usually ``commands(...)``.
        model_factory: Builds a fresh model for every sequence.
        sut_factory: Builds a fresh SUT for every sequence.
        config: Run configuration.
        reporter: Optional reporter for verbose output.
        name: Name used in logs and reports.

    Returns:
        None if every sequence passed, otherwise a PropertyFailure whose
        ``minimized`` value is the shortest failing sequence found.
    """
    prop = stateful_property(command_gen, model_factory, sut_factory, name=name)
    return PropertyRunner(config, reporter=reporter).run(prop)
