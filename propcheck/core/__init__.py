"""Byte source, generators, shrinking and properties."""

from propcheck.core.bytesource import ByteSource
from propcheck.core.generator import (
    DEFAULT_FILTER_ATTEMPTS,
    Generator,
    GeneratorKind,
    Sample,
    filtered,
    lists,
    mapped,
    one_of,
    tuples,
)
from propcheck.core.property import Property, Verdict, forall
from propcheck.core.scalars import (
    INT64_MAX,
    INT64_MIN,
    booleans,
    floats,
    integers,
    integers_of_width,
    just,
    sampled_from,
)
from propcheck.core.shrinking import shrink_float, shrink_integer, shrink_sequence, shrink_target

__all__ = [
    "ByteSource",
    "Generator",
    "GeneratorKind",
    "Sample",
    "DEFAULT_FILTER_ATTEMPTS",
    "mapped",
    "filtered",
    "one_of",
    "tuples",
    "lists",
    "integers",
    "integers_of_width",
    "floats",
    "booleans",
    "sampled_from",
    "just",
    "INT64_MIN",
    "INT64_MAX",
    "Property",
    "Verdict",
    "forall",
    "shrink_integer",
    "shrink_float",
    "shrink_sequence",
    "shrink_target",
]
