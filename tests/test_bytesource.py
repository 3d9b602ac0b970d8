"""Tests for the deterministic byte source."""

from __future__ import annotations

import pytest

from propcheck.core import INT64_MAX, INT64_MIN, ByteSource
from propcheck.errors import ConfigurationError


# =============================================================================
# Construction
# =============================================================================


class TestConstruction:
    """Tests for choosing between a fixed buffer and a seed."""

    def test_requires_buffer_or_seed(self) -> None:
        with pytest.raises(ConfigurationError, match="exactly one"):
            ByteSource()

    def test_rejects_buffer_and_seed_together(self) -> None:
        with pytest.raises(ConfigurationError):
            ByteSource(buffer=b"\x01", seed=1)

    def test_rejects_negative_seed(self) -> None:
        with pytest.raises(ConfigurationError, match="non-negative"):
            ByteSource.from_seed(-1)

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ByteSource()

    def test_fixed_and_seeded_modes(self) -> None:
        assert ByteSource.from_bytes(b"\x00").is_fixed is True
        assert ByteSource.from_seed(0).is_fixed is False
        assert ByteSource.from_seed(9).seed == 9
        assert ByteSource.from_bytes([1, 2]).seed is None


# =============================================================================
# Fixed buffers
# =============================================================================


class TestFixedBuffer:
    """Tests for replaying caller-supplied bytes."""

    def test_bytes_are_returned_in_order(self) -> None:
        source = ByteSource.from_bytes(b"\x01\x02\x03")
        assert source.next_bytes(2) == b"\x01\x02"
        assert source.next_bytes(1) == b"\x03"

    def test_reading_past_end_yields_zero_bytes(self) -> None:
        source = ByteSource.from_bytes(b"")
        assert source.next_bytes(3) == b"\x00\x00\x00"
        assert source.overrun == 3
        assert source.position == 3

    def test_partial_read_is_padded(self) -> None:
        source = ByteSource.from_bytes(b"\xab")
        assert source.next_bytes(3) == b"\xab\x00\x00"
        assert source.overrun == 2

    def test_exhausted_after_last_byte(self) -> None:
        source = ByteSource.from_bytes(b"\x01")
        assert source.exhausted is False
        source.next_bytes(1)
        assert source.exhausted is True

    def test_seeded_source_is_never_exhausted(self) -> None:
        source = ByteSource.from_seed(5)
        source.next_bytes(1024)
        assert source.exhausted is False

    def test_zero_length_read_consumes_nothing(self) -> None:
        source = ByteSource.from_bytes(b"\x01")
        assert source.next_bytes(0) == b""
        assert source.position == 0

    def test_negative_read_rejected(self) -> None:
        with pytest.raises(ValueError):
            ByteSource.from_bytes(b"").next_bytes(-1)


# =============================================================================
# Seeded streams
# =============================================================================


class TestSeededStream:
    """Tests for the pseudo-random stream."""

    def test_same_seed_same_bytes(self) -> None:
        assert ByteSource.from_seed(42).next_bytes(64) == ByteSource.from_seed(42).next_bytes(64)

    def test_different_seeds_differ(self) -> None:
        assert ByteSource.from_seed(1).next_bytes(32) != ByteSource.from_seed(2).next_bytes(32)

    def test_accepts_seeds_wider_than_64_bits(self) -> None:
        source = ByteSource.from_seed(2**80 + 3)
        assert len(source.next_bytes(8)) == 8


# =============================================================================
# Transcript
# =============================================================================


class TestTranscript:
    """Tests for recording the bytes handed out."""

    def test_consumed_returns_slice_between_positions(self) -> None:
        source = ByteSource.from_bytes(b"\x01\x02\x03")
        source.next_bytes(1)
        start = source.position
        source.next_bytes(2)
        assert source.consumed(start) == b"\x02\x03"
        assert source.consumed(0, 1) == b"\x01"

    def test_transcript_includes_fallback_bytes(self) -> None:
        source = ByteSource.from_bytes(b"\x05")
        source.next_bytes(2)
        assert source.consumed() == b"\x05\x00"

    def test_seeded_transcript_replays_identically(self) -> None:
        seeded = ByteSource.from_seed(77)
        values = [seeded.next_in_range(0, 1000) for _ in range(20)]

        replay = ByteSource.from_bytes(seeded.consumed())
        assert [replay.next_in_range(0, 1000) for _ in range(20)] == values


# =============================================================================
# Integer draws
# =============================================================================


class TestIntegerDraws:
    """Tests for uints, ranges and rejection sampling."""

    def test_next_uint_is_big_endian(self) -> None:
        assert ByteSource.from_bytes(b"\x01\x02").next_uint(16) == 0x0102

    def test_next_uint_masks_excess_bits(self) -> None:
        assert ByteSource.from_bytes(b"\xff\xff").next_uint(12) == 0xFFF

    def test_next_in_range_from_buffer(self) -> None:
        assert ByteSource.from_bytes(b"\x07\x00").next_in_range(0, 100) == 7

    def test_degenerate_range_consumes_nothing(self) -> None:
        source = ByteSource.from_bytes(b"\x09")
        assert source.next_in_range(5, 5) == 5
        assert source.position == 0

    def test_rejection_skips_out_of_range_candidates(self) -> None:
        source = ByteSource.from_bytes(bytes([0xFF, 0x03]))
        # 0xFF masks to 7, which is rejected for a span of 5.
        assert source.next_below(5) == 3
        assert source.position == 2

    def test_rejection_terminates_on_exhausted_buffer(self) -> None:
        assert ByteSource.from_bytes(b"").next_below(1000) == 0

    def test_single_value_below_consumes_nothing(self) -> None:
        source = ByteSource.from_bytes(b"\x01")
        assert source.next_below(1) == 0
        assert source.position == 0

    def test_invalid_bounds_rejected(self) -> None:
        source = ByteSource.from_bytes(b"")
        with pytest.raises(ValueError):
            source.next_below(0)
        with pytest.raises(ValueError):
            source.next_in_range(3, 1)

    def test_negative_ranges(self) -> None:
        assert ByteSource.from_bytes(b"\x02").next_in_range(-10, -7) == -8

    def test_full_64_bit_range_stays_in_bounds(self) -> None:
        source = ByteSource.from_seed(123)
        for _ in range(200):
            assert INT64_MIN <= source.next_in_range(INT64_MIN, INT64_MAX) <= INT64_MAX

    def test_seeded_values_cover_small_range(self) -> None:
        source = ByteSource.from_seed(2024)
        seen = {source.next_in_range(0, 3) for _ in range(200)}
        assert seen == {0, 1, 2, 3}


# =============================================================================
# Other draws
# =============================================================================


class TestOtherDraws:
    """Tests for booleans, fractions, chances and weighted picks."""

    def test_next_bool_uses_low_bit(self) -> None:
        assert ByteSource.from_bytes(b"\x01").next_bool() is True
        assert ByteSource.from_bytes(b"\x02").next_bool() is False

    def test_next_fraction_of_zero_bytes(self) -> None:
        assert ByteSource.from_bytes(b"").next_fraction() == 0.0

    def test_next_fraction_is_in_unit_interval(self) -> None:
        source = ByteSource.from_seed(8)
        for _ in range(200):
            assert 0.0 <= source.next_fraction() < 1.0

    def test_chance(self) -> None:
        assert ByteSource.from_bytes(b"\x00").chance(1, 5) is True
        assert ByteSource.from_bytes(b"\x04").chance(1, 5) is False

    def test_chance_rejects_invalid_ratio(self) -> None:
        with pytest.raises(ValueError):
            ByteSource.from_bytes(b"").chance(3, 2)

    def test_weighted_index(self) -> None:
        assert ByteSource.from_bytes(b"\x02").weighted_index([3, 1]) == 0
        assert ByteSource.from_bytes(b"\x03").weighted_index([3, 1]) == 1

    def test_weighted_index_skips_zero_weights(self) -> None:
        assert ByteSource.from_bytes(b"\x00").weighted_index([0, 2]) == 1

    def test_weighted_index_rejects_zero_total(self) -> None:
        with pytest.raises(ValueError):
            ByteSource.from_bytes(b"").weighted_index([0, 0])

    def test_repr(self) -> None:
        assert "seed=3" in repr(ByteSource.from_seed(3))
        assert "2 bytes" in repr(ByteSource.from_bytes(b"\x00\x01"))
