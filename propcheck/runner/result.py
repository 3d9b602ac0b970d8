"""Results of running a property."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

BYTES_PER_LINE = 8


def format_hex_bytes(data: bytes) -> str:
    """Format bytes as a bracketed hex literal, eight bytes per line.

    The output can be pasted back into ``--bytes`` or ``AssertConfig(bytes=...)``.

    Example:
        >>> print(format_hex_bytes(b"\\x07\\x00"))
        [
            0x07, 0x00,
        ]
    """
    if not data:
        return "[]"
    lines = ["["]
    for start in range(0, len(data), BYTES_PER_LINE):
        chunk = data[start:start + BYTES_PER_LINE]
        lines.append("    " + " ".join(f"0x{b:02x}," for b in chunk))
    lines.append("]")
    return "\n".join(lines)


@dataclass
class PropertyFailure:
    """A counterexample to a property, before and after shrinking.

    Attributes:
        property_name: Name of the property that failed.
        original: The first failing value found.
        minimized: The smallest failing value shrinking reached.
        shrink_steps: Number of accepted shrink steps.
        replay_bytes: Exact bytes consumed by the failing trial. Running
            the property once against them regenerates ``original``.
        seed: Seed of the run, None when it replayed a fixed buffer.
        trial: Zero-based index of the failing trial.
        num_passed: Trials that passed before the failure.
        duration_ms: Wall time of the run, shrinking included.
        error: Assertion message when the predicate failed by raising.
        timestamp: When the failure was found.
    """

    property_name: str
    original: Any
    minimized: Any
    shrink_steps: int
    replay_bytes: bytes
    seed: int | None = None
    trial: int = 0
    num_passed: int = 0
    duration_ms: float = 0.0
    error: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def shrunk(self) -> bool:
        """Whether shrinking found a smaller counterexample."""
        return self.shrink_steps > 0

    def format_replay_bytes(self) -> str:
        """Format the replay buffer as a hex literal, eight bytes per line."""
        return format_hex_bytes(self.replay_bytes)

    def summary(self) -> str:
        """Generate a human-readable summary of the failure.

        Returns:
            Multi-line summary string.
        """
        lines = [
            f"Property '{self.property_name}' failed after {self.num_passed} passing trials",
            f"  Minimized:    {self.minimized!r}",
            f"  Original:     {self.original!r}",
            f"  Shrink steps: {self.shrink_steps}",
        ]
        if self.error:
            lines.append(f"  Assertion:    {self.error}")
        if self.seed is not None:
            lines.append(f"  Seed:         {self.seed} (trial {self.trial})")
        lines.append(f"  Replay with runs=1 and bytes={self.replay_bytes.hex()}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "property": self.property_name,
            "original": repr(self.original),
            "minimized": repr(self.minimized),
            "shrink_steps": self.shrink_steps,
            "replay_bytes": self.replay_bytes.hex(),
            "seed": self.seed,
            "trial": self.trial,
            "num_passed": self.num_passed,
            "duration_ms": round(self.duration_ms, 3),
            "error": self.error or None,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RunStats:
    """Counters for one run of a property.

    Attributes:
        property_name: Name of the property.
        seed: Seed of the run, None for a fixed buffer.
        trials: Trials executed, including the failing one.
        passed: Trials that passed.
        shrink_candidates: Shrink candidates evaluated.
        shrink_steps: Shrink candidates accepted.
        bytes_consumed: Bytes drawn from the source across all trials.
        duration_ms: Wall time of the run.
    """

    property_name: str
    seed: int | None = None
    trials: int = 0
    passed: int = 0
    shrink_candidates: int = 0
    shrink_steps: int = 0
    bytes_consumed: int = 0
    duration_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.passed < self.trials

    def to_dict(self) -> dict[str, Any]:
        return {
            "property": self.property_name,
            "seed": self.seed,
            "trials": self.trials,
            "passed": self.passed,
            "failed": self.failed,
            "shrink_candidates": self.shrink_candidates,
            "shrink_steps": self.shrink_steps,
            "bytes_consumed": self.bytes_consumed,
            "duration_ms": round(self.duration_ms, 3),
        }
