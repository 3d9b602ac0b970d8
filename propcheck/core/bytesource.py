"""Deterministic byte supply for generators.

Every sampling decision a generator makes is derived from a ByteSource.
A source either replays a fixed buffer supplied by the caller or pulls
from a private pseudo-random stream seeded with a 64-bit (or wider)
integer. Reading past the end of a fixed buffer never fails: the source
keeps handing out zero bytes, so every generator built on top of it
terminates even when replayed against a truncated buffer.

All bytes handed out are recorded in a transcript. The runner uses it to
cut out the exact bytes a single trial consumed, which is what makes a
failure replayable from the buffer alone.

Example:
    >>> source = ByteSource.from_seed(42)
    >>> source.next_in_range(0, 100)
    >>> replay = ByteSource.from_bytes(b"\\x07\\x00")
    >>> replay.next_in_range(0, 100)
    7
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from propcheck.errors import ConfigurationError

logger = logging.getLogger(__name__)

FALLBACK_BYTE = 0
FRACTION_BITS = 53


class ByteSource:
    """A cursor over a fixed buffer or a seeded pseudo-random stream.

    Not safe for concurrent use: each run owns its own source.

    Attributes:
        seed: The seed of a streamed source, None for a fixed buffer.
    """

    def __init__(self, buffer: bytes | None = None, seed: int | None = None) -> None:
        if (buffer is None) == (seed is None):
            raise ConfigurationError(
                "ByteSource needs exactly one of a fixed buffer or a seed",
            )
        if seed is not None and seed < 0:
            raise ConfigurationError(f"Seed must be non-negative, got {seed}")

        self.seed = seed
        self._buffer = bytes(buffer) if buffer is not None else None
        self._rng = random.Random(seed) if seed is not None else None
        self._transcript = bytearray()
        self._overrun = 0

    @classmethod
    def from_bytes(cls, buffer: bytes | bytearray | Sequence[int]) -> ByteSource:
        """Create a source that replays a fixed buffer."""
        return cls(buffer=bytes(buffer))

    @classmethod
    def from_seed(cls, seed: int) -> ByteSource:
        """Create a source backed by a pseudo-random stream."""
        return cls(seed=seed)

    @property
    def is_fixed(self) -> bool:
        """Whether this source replays a caller-supplied buffer."""
        return self._buffer is not None

    @property
    def position(self) -> int:
        """Number of bytes handed out so far."""
        return len(self._transcript)

    @property
    def exhausted(self) -> bool:
        """Whether a fixed buffer has been read to its end.

        A seeded stream is never exhausted.
        """
        if self._buffer is None:
            return False
        return self.position >= len(self._buffer)

    @property
    def overrun(self) -> int:
        """Number of fallback bytes returned past the end of the buffer."""
        return self._overrun

    def consumed(self, start: int = 0, end: int | None = None) -> bytes:
        """Return the bytes handed out between two positions."""
        return bytes(self._transcript[start:end])

    def next_bytes(self, n: int) -> bytes:
        """Return the next ``n`` bytes, padding with zeros past a buffer's end."""
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")
        if n == 0:
            return b""

        if self._rng is not None:
            chunk = self._rng.randbytes(n)
        else:
            assert self._buffer is not None
            pos = self.position
            chunk = self._buffer[pos:pos + n]
            missing = n - len(chunk)
            if missing:
                if not self._overrun:
                    logger.debug(
                        f"Fixed buffer of {len(self._buffer)} bytes exhausted, "
                        f"falling back to zero bytes"
                    )
                self._overrun += missing
                chunk += bytes([FALLBACK_BYTE]) * missing

        self._transcript += chunk
        return chunk

    def next_uint(self, bits: int) -> int:
        """Read an unsigned integer of ``bits`` bits, big-endian."""
        if bits <= 0:
            return 0
        n_bytes = (bits + 7) // 8
        raw = int.from_bytes(self.next_bytes(n_bytes), "big")
        return raw & ((1 << bits) - 1)

    def next_below(self, n: int) -> int:
        """Return an integer uniformly distributed in ``[0, n)``.

        Uses bitmask rejection sampling. Zero is always accepted, so the
        loop terminates once a fixed buffer runs dry.
        """
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}")
        if n == 1:
            return 0

        bits = (n - 1).bit_length()
        while True:
            candidate = self.next_uint(bits)
            if candidate < n:
                return candidate

    def next_in_range(self, lo: int, hi: int) -> int:
        """Return an integer uniformly distributed in ``[lo, hi]``."""
        if lo > hi:
            raise ValueError(f"Empty range [{lo}, {hi}]")
        if lo == hi:
            return lo
        return lo + self.next_below(hi - lo + 1)

    def next_bool(self) -> bool:
        """Return a boolean from the low bit of one byte."""
        return self.next_bytes(1)[0] & 1 == 1

    def next_fraction(self) -> float:
        """Return a float in ``[0, 1)`` with 53 bits of resolution."""
        return self.next_uint(FRACTION_BITS) / float(1 << FRACTION_BITS)

    def chance(self, numerator: int, denominator: int) -> bool:
        """Return True with probability ``numerator / denominator``."""
        if denominator <= 0 or not 0 <= numerator <= denominator:
            raise ValueError(f"Invalid ratio {numerator}/{denominator}")
        return self.next_below(denominator) < numerator

    def weighted_index(self, weights: Sequence[int]) -> int:
        """Pick an index with probability proportional to its weight."""
        total = sum(weights)
        if not weights or total <= 0:
            raise ValueError("Weights must contain a positive total")

        pick = self.next_below(total)
        cumulative = 0
        for i, weight in enumerate(weights):
            cumulative += weight
            if pick < cumulative:
                return i
        return len(weights) - 1

    def __repr__(self) -> str:
        if self._buffer is not None:
            return f"ByteSource(buffer={len(self._buffer)} bytes, position={self.position})"
        return f"ByteSource(seed={self.seed}, position={self.position})"
