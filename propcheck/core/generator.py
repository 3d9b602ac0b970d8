"""Generators and the combinators that compose them.

A Generator is an immutable description of "random values of type T":
given a ByteSource it deterministically draws a value, and given a value
it drew it can enumerate smaller candidates for shrinking.

Rather than one subclass per variant, every generator is the same frozen
dataclass tagged with a GeneratorKind and carrying its draw and shrink
strategies as data. Combinators build their strategies structurally from
their children's, so the shrink strategy of a tuple of mapped integers
is assembled at construction time with no dynamic lookup.

Shrinking needs more than the final value: a mapped value can only be
shrunk through the value it was mapped from, and a one-of value only
inside the alternative that produced it. Drawing therefore returns a
Sample, which pairs the value with the generator-specific ``origin``
needed to shrink it.

Example:
    >>> from propcheck.core.scalars import integers, booleans
    >>> pairs = tuples(integers(0, 10), booleans())
    >>> evens = integers(0, 1000).filter(lambda n: n % 2 == 0)
    >>> labels = integers(0, 9).map(str)
    >>> either = one_of(integers(0, 9), integers(100, 109), weights=[3, 1])
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from propcheck.core.bytesource import ByteSource
from propcheck.core.shrinking import shrink_sequence
from propcheck.errors import (
    ConfigurationError,
    EmptyChoiceError,
    ErrorContext,
    GeneratorExhaustedError,
    InvalidRangeError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_FILTER_ATTEMPTS = 100
DEFAULT_MAX_LIST_SIZE = 100


class GeneratorKind(Enum):
    """The structural variant of a generator."""

    SCALAR = "scalar"
    MAPPED = "mapped"
    FILTERED = "filtered"
    ONE_OF = "one_of"
    TUPLE = "tuple"
    LIST = "list"


@dataclass(frozen=True)
class Sample(Generic[T]):
    """A drawn value together with what its generator needs to shrink it.

    Attributes:
        value: The generated value handed to the predicate.
        origin: Generator-specific shrink context. None for scalars, the
            source Sample for mapped values, ``(index, Sample)`` for
            one-of values and a tuple of Samples for tuples and lists.
    """

    value: T
    origin: Any = None


DrawFn = Callable[[ByteSource], Sample[T]]
ShrinkFn = Callable[[Sample[T]], Iterator[Sample[T]]]


def _no_shrink(sample: Sample[Any]) -> Iterator[Sample[Any]]:
    return iter(())


@dataclass(frozen=True, eq=False)
class Generator(Generic[T]):
    """A reusable, immutable source of values of type T.

    Attributes:
        kind: Which structural variant this generator is.
        label: Human-readable description used in logs and reports.
        draw_fn: Produces a Sample from a ByteSource.
        shrink_fn: Yields smaller Samples for a Sample this generator drew.
        children: Component generators, in declared order.
    """

    kind: GeneratorKind
    label: str
    draw_fn: DrawFn[T] = field(repr=False)
    shrink_fn: ShrinkFn[T] = field(default=_no_shrink, repr=False)
    children: tuple[Generator[Any], ...] = field(default=(), repr=False)

    def draw(self, source: ByteSource) -> Sample[T]:
        """Draw a value and its shrink context from ``source``."""
        return self.draw_fn(source)

    def produce(self, source: ByteSource) -> T:
        """Draw just the value from ``source``."""
        return self.draw_fn(source).value

    def shrink(self, sample: Sample[T]) -> Iterator[Sample[T]]:
        """Lazily yield smaller candidates for a sample, most aggressive first.

        Shrinking never reads from a ByteSource; it works purely on the
        sample and this generator's shrink relation.
        """
        return self.shrink_fn(sample)

    def map(self, transform: Callable[[T], U], label: str | None = None) -> Generator[U]:
        """Return a generator of ``transform(value)``."""
        return mapped(self, transform, label=label)

    def filter(
        self,
        predicate: Callable[[T], bool],
        max_attempts: int = DEFAULT_FILTER_ATTEMPTS,
        label: str | None = None,
    ) -> Generator[T]:
        """Return a generator of the values that satisfy ``predicate``."""
        return filtered(self, predicate, max_attempts=max_attempts, label=label)

    def __repr__(self) -> str:
        return self.label


def _callable_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__name__", type(fn).__name__)


def mapped(
    source: Generator[T],
    transform: Callable[[T], U],
    label: str | None = None,
) -> Generator[U]:
    """Wrap ``source`` so that every value is passed through ``transform``.

    The source is drawn exactly once per produced value. Shrinking
    shrinks the source value and re-applies the transform to each
    candidate.
    """

    def draw(bs: ByteSource) -> Sample[U]:
        inner = source.draw(bs)
        return Sample(transform(inner.value), origin=inner)

    def shrink(sample: Sample[U]) -> Iterator[Sample[U]]:
        if sample.origin is None:
            return
        for candidate in source.shrink(sample.origin):
            yield Sample(transform(candidate.value), origin=candidate)

    return Generator(
        kind=GeneratorKind.MAPPED,
        label=label or f"{source.label}.map({_callable_name(transform)})",
        draw_fn=draw,
        shrink_fn=shrink,
        children=(source,),
    )


def filtered(
    source: Generator[T],
    predicate: Callable[[T], bool],
    max_attempts: int = DEFAULT_FILTER_ATTEMPTS,
    label: str | None = None,
) -> Generator[T]:
    """Wrap ``source`` so that only values satisfying ``predicate`` are produced.

    Sampling retries up to ``max_attempts`` times and then raises
    GeneratorExhaustedError. Shrinking keeps only the source's shrink
    candidates that still satisfy the predicate.

    Raises:
        ConfigurationError: If ``max_attempts`` is not positive.
    """
    if max_attempts < 1:
        raise ConfigurationError(
            f"Filter budget must be at least 1 attempt, got {max_attempts}",
        )

    name = label or f"{source.label}.filter({_callable_name(predicate)})"

    def draw(bs: ByteSource) -> Sample[T]:
        for attempt in range(1, max_attempts + 1):
            sample = source.draw(bs)
            if predicate(sample.value):
                if attempt > 1:
                    logger.debug(f"{name} accepted a value after {attempt} attempts")
                return sample

        raise GeneratorExhaustedError(
            f"{name} rejected {max_attempts} consecutive candidates",
            context=ErrorContext(generator=name, attempts=max_attempts),
        )

    def shrink(sample: Sample[T]) -> Iterator[Sample[T]]:
        for candidate in source.shrink(sample):
            if predicate(candidate.value):
                yield candidate

    return Generator(
        kind=GeneratorKind.FILTERED,
        label=name,
        draw_fn=draw,
        shrink_fn=shrink,
        children=(source,),
    )


def one_of(*alternatives: Generator[T], weights: Sequence[int] | None = None) -> Generator[T]:
    """Choose one alternative per draw, then delegate to it.

    A single index is drawn from the source first: uniformly in
    ``[0, len(alternatives))``, or proportionally to ``weights``.
    Shrinking stays within the chosen alternative; switching alternatives
    is never attempted because re-deriving an index could change the
    value's shape unpredictably.

    Raises:
        EmptyChoiceError: If no alternatives are given.
        ConfigurationError: If weights are malformed.
    """
    if not alternatives:
        raise EmptyChoiceError("one_of() requires at least one alternative")

    weight_list: list[int] | None = None
    if weights is not None:
        weight_list = list(weights)
        if len(weight_list) != len(alternatives):
            raise ConfigurationError(
                f"one_of() got {len(weight_list)} weights for "
                f"{len(alternatives)} alternatives"
            )
        if any(w < 0 for w in weight_list) or sum(weight_list) <= 0:
            raise ConfigurationError(
                "one_of() weights must be non-negative with a positive total",
            )

    def draw(bs: ByteSource) -> Sample[T]:
        if weight_list is not None:
            index = bs.weighted_index(weight_list)
        else:
            index = bs.next_below(len(alternatives))
        inner = alternatives[index].draw(bs)
        return Sample(inner.value, origin=(index, inner))

    def shrink(sample: Sample[T]) -> Iterator[Sample[T]]:
        if sample.origin is None:
            return
        index, inner = sample.origin
        for candidate in alternatives[index].shrink(inner):
            yield Sample(candidate.value, origin=(index, candidate))

    return Generator(
        kind=GeneratorKind.ONE_OF,
        label=f"one_of({', '.join(g.label for g in alternatives)})",
        draw_fn=draw,
        shrink_fn=shrink,
        children=tuple(alternatives),
    )


def tuples(*components: Generator[Any]) -> Generator[tuple[Any, ...]]:
    """Produce fixed-arity tuples, one element per component generator.

    Components draw from the shared source in declared order, so each
    component's bytes are independent of the others' configuration.
    Shrinking shrinks exactly one component at a time, in declared order,
    holding the others fixed.
    """

    def draw(bs: ByteSource) -> Sample[tuple[Any, ...]]:
        parts = tuple(component.draw(bs) for component in components)
        return Sample(tuple(part.value for part in parts), origin=parts)

    def shrink(sample: Sample[tuple[Any, ...]]) -> Iterator[Sample[tuple[Any, ...]]]:
        parts = sample.origin
        if parts is None:
            return
        for i, component in enumerate(components):
            for candidate in component.shrink(parts[i]):
                new_parts = parts[:i] + (candidate,) + parts[i + 1:]
                yield Sample(tuple(part.value for part in new_parts), origin=new_parts)

    return Generator(
        kind=GeneratorKind.TUPLE,
        label=f"tuples({', '.join(g.label for g in components)})",
        draw_fn=draw,
        shrink_fn=shrink,
        children=tuple(components),
    )


def lists(
    elements: Generator[T],
    min_size: int = 0,
    max_size: int = DEFAULT_MAX_LIST_SIZE,
) -> Generator[list[T]]:
    """Produce lists whose length lies in ``[min_size, max_size]``.

    The length is drawn first, then each element in order. Lists shrink
    by dropping elements before shrinking them.

    Raises:
        InvalidRangeError: If the size bounds are negative or inverted.
    """
    if min_size < 0:
        raise InvalidRangeError(f"min_size must be non-negative, got {min_size}")
    if min_size > max_size:
        raise InvalidRangeError(f"min_size {min_size} exceeds max_size {max_size}")

    def draw(bs: ByteSource) -> Sample[list[T]]:
        size = bs.next_in_range(min_size, max_size)
        parts = tuple(elements.draw(bs) for _ in range(size))
        return Sample([part.value for part in parts], origin=parts)

    def shrink(sample: Sample[list[T]]) -> Iterator[Sample[list[T]]]:
        parts = sample.origin
        if parts is None:
            return
        for candidate in shrink_sequence(parts, min_size, elements.shrink):
            yield Sample([part.value for part in candidate], origin=tuple(candidate))

    return Generator(
        kind=GeneratorKind.LIST,
        label=f"lists({elements.label}, {min_size}..{max_size})",
        draw_fn=draw,
        shrink_fn=shrink,
        children=(elements,),
    )
