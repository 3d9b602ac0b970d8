"""Model-based testing of stateful systems."""

from propcheck.stateful.commands import (
    Command,
    FunctionCommand,
    assert_stateful,
    command,
    commands,
    model_after,
    run_sequence,
    stateful_property,
)

__all__ = [
    "Command",
    "FunctionCommand",
    "command",
    "commands",
    "model_after",
    "run_sequence",
    "stateful_property",
    "assert_stateful",
]
