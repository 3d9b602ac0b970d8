"""Properties: a generator paired with a predicate that should always hold."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from propcheck.core.generator import Generator

T = TypeVar("T")

Hook = Callable[[], None]


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating a predicate on one value.

    Attributes:
        holds: Whether the predicate held.
        message: First line of the assertion message when the predicate
            failed by raising AssertionError, empty otherwise.
    """

    holds: bool
    message: str = ""


@dataclass(frozen=True, eq=False)
class Property(Generic[T]):
    """A universally quantified claim: ``predicate(v)`` for every ``v`` from ``generator``.

    Properties are immutable and stateless and may be run any number of
    times, from any number of threads.

    A predicate may return a bool or use plain ``assert`` statements:
    a falsy result or an AssertionError is a failure, while ``None``
    counts as success. Any other exception propagates to the caller.

    Attributes:
        generator: Source of test values.
        predicate: The claim being tested.
        name: Name used in reports. Defaults to the predicate's name.
        before_each: Called before every predicate evaluation.
        after_each: Called after every predicate evaluation, even if the
            predicate raised.

    Example:
        >>> prop = Property(integers(0, 100), lambda n: n < 10, name="small")
        >>> failure = assert_property(prop)
        >>> failure.minimized
        10
    """

    generator: Generator[T]
    predicate: Callable[[T], Any]
    name: str = ""
    before_each: Hook | None = field(default=None, repr=False)
    after_each: Hook | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(
                self, "name", getattr(self.predicate, "__name__", "property")
            )

    def with_hooks(
        self,
        before_each: Hook | None = None,
        after_each: Hook | None = None,
    ) -> Property[T]:
        """Return a copy of this property with setup/teardown hooks attached."""
        return replace(
            self,
            before_each=before_each or self.before_each,
            after_each=after_each or self.after_each,
        )

    def evaluate(self, value: T) -> Verdict:
        """Run the hooks and the predicate on ``value``."""
        if self.before_each is not None:
            self.before_each()
        try:
            result = self.predicate(value)
        except AssertionError as e:
            # First line only: pytest appends its assertion explanation.
            lines = str(e).splitlines()
            return Verdict(holds=False, message=lines[0] if lines else "assertion failed")
        finally:
            if self.after_each is not None:
                self.after_each()

        if result is None:
            return Verdict(holds=True)
        return Verdict(holds=bool(result))

    def holds(self, value: T) -> bool:
        """Whether the predicate holds for ``value``."""
        return self.evaluate(value).holds


def forall(
    generator: Generator[T],
    name: str | None = None,
) -> Callable[[Callable[[T], Any]], Property[T]]:
    """Decorator form of Property.

    Example:
        >>> @forall(integers(0, 100))
        ... def below_fifty(n):
        ...     return n < 50
        >>> isinstance(below_fifty, Property)
        True
    """

    def decorator(predicate: Callable[[T], Any]) -> Property[T]:
        return Property(generator=generator, predicate=predicate, name=name or "")

    return decorator
