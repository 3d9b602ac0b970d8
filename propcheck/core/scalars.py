"""Scalar generators: integers, floats, booleans and fixed choices."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable, Iterator
from typing import Any, TypeVar

from propcheck.core.bytesource import ByteSource
from propcheck.core.generator import Generator, GeneratorKind, Sample
from propcheck.core.shrinking import shrink_float, shrink_integer, shrink_target
from propcheck.errors import ConfigurationError, EmptyChoiceError, InvalidRangeError

T = TypeVar("T")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# One draw in five picks a boundary value when edges are enabled.
EDGE_CHANCE = (1, 5)


def _ordered_unique(values: Iterable[T]) -> list[T]:
    seen: list[T] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def integer_boundaries(min_value: int, max_value: int) -> list[int]:
    """Boundary values worth trying for an integer range, in a fixed order."""
    candidates = [min_value, min_value + 1, -1, 0, 1, max_value - 1, max_value]
    return _ordered_unique(c for c in candidates if min_value <= c <= max_value)


def float_boundaries(min_value: float, max_value: float) -> list[float]:
    """Special values worth trying for a float range, in a fixed order."""
    tiny = sys.float_info.min
    candidates = [min_value, 0.0, -1.0, 1.0, tiny, -tiny, max_value]
    return _ordered_unique(c for c in candidates if min_value <= c <= max_value)


def integers(
    min_value: int = INT64_MIN,
    max_value: int = INT64_MAX,
    edges: bool = False,
) -> Generator[int]:
    """Integers uniformly distributed in ``[min_value, max_value]``.

    Values shrink towards zero, or towards the bound nearest zero when
    zero is out of range.

    Args:
        min_value: Smallest value produced (inclusive).
        max_value: Largest value produced (inclusive).
        edges: When True, one draw in five picks a boundary value
            (min, min+1, -1, 0, 1, max-1, max) instead.

    Raises:
        InvalidRangeError: If ``min_value > max_value``.
    """
    if min_value > max_value:
        raise InvalidRangeError(
            f"integers(): min_value {min_value} exceeds max_value {max_value}",
        )

    target = shrink_target(min_value, max_value)
    boundaries = integer_boundaries(min_value, max_value)

    def draw(bs: ByteSource) -> Sample[int]:
        if edges and bs.chance(*EDGE_CHANCE):
            return Sample(boundaries[bs.next_below(len(boundaries))])
        return Sample(bs.next_in_range(min_value, max_value))

    def shrink(sample: Sample[int]) -> Iterator[Sample[int]]:
        for candidate in shrink_integer(sample.value, target):
            yield Sample(candidate)

    return Generator(
        kind=GeneratorKind.SCALAR,
        label=f"integers({min_value}, {max_value})",
        draw_fn=draw,
        shrink_fn=shrink,
    )


def integers_of_width(bits: int, signed: bool = True, edges: bool = False) -> Generator[int]:
    """Integers covering the full range of a fixed-width machine type.

    ``integers_of_width(16)`` covers an i16, ``integers_of_width(8, signed=False)`` a u8.
    """
    if bits < 1:
        raise ConfigurationError(f"Integer width must be at least 1 bit, got {bits}")
    if signed:
        return integers(-(1 << (bits - 1)), (1 << (bits - 1)) - 1, edges=edges)
    return integers(0, (1 << bits) - 1, edges=edges)


def floats(
    min_value: float = -100.0,
    max_value: float = 100.0,
    edges: bool = False,
) -> Generator[float]:
    """Floats uniformly distributed in ``[min_value, max_value]``.

    Raises:
        ConfigurationError: If a bound is not finite.
        InvalidRangeError: If ``min_value > max_value``.
    """
    if not (math.isfinite(min_value) and math.isfinite(max_value)):
        raise ConfigurationError(
            f"floats(): bounds must be finite, got [{min_value}, {max_value}]",
        )
    if min_value > max_value:
        raise InvalidRangeError(
            f"floats(): min_value {min_value} exceeds max_value {max_value}",
        )

    target = float(shrink_target(min_value, max_value))
    boundaries = float_boundaries(min_value, max_value)
    width = max_value - min_value

    def draw(bs: ByteSource) -> Sample[float]:
        if edges and bs.chance(*EDGE_CHANCE):
            return Sample(boundaries[bs.next_below(len(boundaries))])
        value = min_value + width * bs.next_fraction()
        return Sample(min(value, max_value))

    def shrink(sample: Sample[float]) -> Iterator[Sample[float]]:
        for candidate in shrink_float(sample.value, target, min_value, max_value):
            yield Sample(candidate)

    return Generator(
        kind=GeneratorKind.SCALAR,
        label=f"floats({min_value}, {max_value})",
        draw_fn=draw,
        shrink_fn=shrink,
    )


def booleans() -> Generator[bool]:
    """True or False with equal probability. True shrinks to False."""

    def draw(bs: ByteSource) -> Sample[bool]:
        return Sample(bs.next_bool())

    def shrink(sample: Sample[bool]) -> Iterator[Sample[bool]]:
        if sample.value:
            yield Sample(False)

    return Generator(
        kind=GeneratorKind.SCALAR,
        label="booleans()",
        draw_fn=draw,
        shrink_fn=shrink,
    )


def sampled_from(values: Iterable[T]) -> Generator[T]:
    """One of a fixed collection of values, such as the members of an Enum.

    Values shrink towards the front of the collection.

    Raises:
        EmptyChoiceError: If ``values`` is empty.
    """
    choices = tuple(values)
    if not choices:
        raise EmptyChoiceError("sampled_from() requires at least one value")

    def draw(bs: ByteSource) -> Sample[T]:
        index = bs.next_below(len(choices))
        return Sample(choices[index], origin=index)

    def shrink(sample: Sample[T]) -> Iterator[Sample[T]]:
        index = sample.origin
        if index is None:
            if sample.value not in choices:
                return
            index = choices.index(sample.value)
        for candidate in shrink_integer(index, 0):
            yield Sample(choices[candidate], origin=candidate)

    return Generator(
        kind=GeneratorKind.SCALAR,
        label=f"sampled_from({len(choices)} values)",
        draw_fn=draw,
        shrink_fn=shrink,
    )


def just(value: Any) -> Generator[Any]:
    """Always ``value``, consuming no bytes."""

    def draw(bs: ByteSource) -> Sample[Any]:
        return Sample(value)

    return Generator(
        kind=GeneratorKind.SCALAR,
        label=f"just({value!r})",
        draw_fn=draw,
    )
