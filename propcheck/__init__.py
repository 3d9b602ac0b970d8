"""propcheck - property-based testing with shrinking.

propcheck checks that a predicate holds for many generated inputs. When
it finds an input that breaks the predicate it shrinks it to a minimal
counterexample and records the exact bytes that produced it, so the
failure can be replayed deterministically.

Example:
    >>> from propcheck import Property, assert_property, integers, lists
    >>>
    >>> def reverse_twice(xs):
    ...     return list(reversed(list(reversed(xs)))) == xs
    >>>
    >>> assert_property(Property(lists(integers()), reverse_twice)) is None
    True

    Inside a pytest test, ``verify`` raises on failure instead:

    >>> @forall(integers(0, 1000))
    ... def below_ten(n):
    ...     assert n < 10
    >>> verify(below_ten)  # raises PropertyFailedError, minimized to 10

Core API:
    ByteSource: Deterministic byte supply, fixed buffer or seeded stream
    Generator: Immutable value generator with a shrink relation
    Property: A generator paired with a predicate
    assert_property: Run a property, return the shrunk failure or None
    verify: Run a property, raise PropertyFailedError on failure
"""

from propcheck.config import AssertConfig, load_config
from propcheck.core import (
    INT64_MAX,
    INT64_MIN,
    ByteSource,
    Generator,
    GeneratorKind,
    Property,
    Sample,
    Verdict,
    booleans,
    filtered,
    floats,
    forall,
    integers,
    integers_of_width,
    just,
    lists,
    mapped,
    one_of,
    sampled_from,
    tuples,
)
from propcheck.errors import (
    ConfigLoadError,
    ConfigurationError,
    EmptyChoiceError,
    ErrorCode,
    GeneratorExhaustedError,
    InvalidRangeError,
    PropcheckError,
    PropertyFailedError,
)
from propcheck.reporters import ConsoleReporter
from propcheck.runner import (
    PropertyFailure,
    PropertyRunner,
    RunStats,
    assert_property,
    replay,
    verify,
)
from propcheck.stateful import Command, assert_stateful, command, commands

__version__ = "0.1.0"

__all__ = [
    # Byte source and generators
    "ByteSource",
    "Generator",
    "GeneratorKind",
    "Sample",
    "integers",
    "integers_of_width",
    "floats",
    "booleans",
    "sampled_from",
    "just",
    "lists",
    "tuples",
    "one_of",
    "mapped",
    "filtered",
    "INT64_MIN",
    "INT64_MAX",
    # Properties and running
    "Property",
    "Verdict",
    "forall",
    "AssertConfig",
    "load_config",
    "PropertyRunner",
    "PropertyFailure",
    "RunStats",
    "assert_property",
    "replay",
    "verify",
    "ConsoleReporter",
    # Stateful
    "Command",
    "command",
    "commands",
    "assert_stateful",
    # Errors
    "ErrorCode",
    "PropcheckError",
    "ConfigurationError",
    "InvalidRangeError",
    "EmptyChoiceError",
    "ConfigLoadError",
    "GeneratorExhaustedError",
    "PropertyFailedError",
]
