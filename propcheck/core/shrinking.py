"""Shrink relations for scalar and sequence values.

Each function here yields a finite, lazily evaluated sequence of
candidates that are strictly "smaller" than the input, most aggressive
reduction first. They work on plain values: the structural shrinkers for
mapped, filtered, one-of and tuple generators live in
``propcheck.core.generator`` and delegate down to these.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")

MAX_FLOAT_HALVINGS = 16


def shrink_target(min_value: int | float, max_value: int | float) -> int | float:
    """The value a scalar in ``[min_value, max_value]`` shrinks towards.

    Zero when it is in range, otherwise the bound closest to zero.
    """
    if min_value > 0:
        return min_value
    if max_value < 0:
        return max_value
    return 0


def shrink_integer(value: int, target: int) -> Iterator[int]:
    """Yield integers between ``target`` and ``value`` by repeated bisection.

    The first candidate is the target itself, followed by points that
    close the remaining distance by half, a quarter, and so on, down to a
    single step. Searching from a failing value therefore needs
    O(log(distance)) candidates per level.

    Example:
        >>> list(shrink_integer(100, 0))
        [0, 50, 75, 88, 94, 97, 99]
    """
    distance = value - target
    if distance == 0:
        return

    seen: set[int] = set()
    step = distance
    while step != 0:
        candidate = value - step
        if candidate not in seen:
            seen.add(candidate)
            yield candidate
        # Halve towards zero so both signs converge.
        step = step // 2 if step > 0 else -(-step // 2)


def shrink_float(value: float, target: float, min_value: float, max_value: float) -> Iterator[float]:
    """Yield floats closer to ``target`` than ``value``, all inside the range.

    NaN and infinities are not shrunk.
    """
    if math.isnan(value) or math.isinf(value) or value == target:
        return

    seen: set[float] = {value}

    def in_range(candidate: float) -> bool:
        return min_value <= candidate <= max_value and candidate not in seen

    if in_range(target):
        seen.add(target)
        yield target

    truncated = float(math.trunc(value))
    if in_range(truncated) and abs(truncated - target) < abs(value - target):
        seen.add(truncated)
        yield truncated

    distance = value - target
    for _ in range(MAX_FLOAT_HALVINGS):
        distance /= 2
        candidate = target + distance
        if candidate == value:
            break
        if in_range(candidate):
            seen.add(candidate)
            yield candidate


def shrink_sequence(
    items: Sequence[T],
    min_size: int,
    shrink_item: Callable[[T], Iterator[T]],
) -> Iterator[list[T]]:
    """Yield smaller versions of a sequence.

    Order: the shortest allowed prefix, the half-length prefix, every
    single-element deletion, then every element-wise shrink in index
    order. Lengths never drop below ``min_size``.
    """
    length = len(items)

    if length > min_size:
        yield list(items[:min_size])

        half = max(min_size, length // 2)
        if min_size < half < length:
            yield list(items[:half])

        for i in range(length):
            # Dropping the last element repeats a prefix already yielded.
            if i == length - 1 and length - 1 in (min_size, half):
                continue
            yield list(items[:i]) + list(items[i + 1:])

    for i, item in enumerate(items):
        for smaller in shrink_item(item):
            candidate = list(items)
            candidate[i] = smaller
            yield candidate
