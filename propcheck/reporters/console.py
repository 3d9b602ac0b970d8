"""Console reporter for terminal output."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from propcheck.runner.result import PropertyFailure, RunStats


class ConsoleReporter:
    """Writes human-readable progress and results for property runs.

    In verbose runs it prints one line per trial and per accepted shrink
    step; at the end of a run it prints either a pass line or a boxed
    failure report with the minimized counterexample and replay bytes.
    """

    # ANSI color codes
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    # Box drawing characters
    BOX_TL = "┌"
    BOX_TR = "┐"
    BOX_BL = "└"
    BOX_BR = "┘"
    BOX_H = "─"
    BOX_V = "│"

    MAX_VALUE_CHARS = 200

    def __init__(self, file: TextIO | None = None, color: bool = True) -> None:
        self.file = file or sys.stderr
        self.color = color

    def _c(self, text: str, code: str) -> str:
        """Apply color if enabled."""
        if self.color:
            return f"{code}{text}{self.RESET}"
        return text

    def trial(self, index: int, value: Any, holds: bool) -> None:
        """Report one sampled trial."""
        mark = self._c("✓", self.GREEN) if holds else self._c("✗", self.RED)
        self._line(f"  {mark} trial {index}: {self._truncate(repr(value))}")

    def shrink_step(self, step: int, value: Any) -> None:
        """Report one accepted shrink step."""
        label = self._c(f"shrink {step}:", self.CYAN)
        self._line(f"    {label} {self._truncate(repr(value))}")

    def passed(self, stats: RunStats) -> None:
        """Report a property that held for every trial."""
        icon = self._c("✓", self.GREEN)
        name = self._c(stats.property_name, self.BOLD)
        details = f"{stats.trials} trials, {stats.duration_ms:.0f}ms"
        if stats.seed is not None:
            details += f", seed {stats.seed}"
        self._line(f"  {icon} {name} {self._c('passed', self.GREEN)} ({details})")

    def failed(self, failure: PropertyFailure) -> None:
        """Report a counterexample."""
        icon = self._c("✗", self.RED)
        name = self._c(failure.property_name, self.BOLD)
        self._line(f"  {icon} {name} {self._c('FAILED', self.RED + self.BOLD)}")

        self._line(f"  {self.BOX_TL}{self.BOX_H * 58}{self.BOX_TR}")
        self._line(f"  {self.BOX_V} {self._c('Minimized:', self.BOLD)} {self._truncate(repr(failure.minimized))}")
        self._line(f"  {self.BOX_V} {self._c('Original:', self.DIM)}  {self._truncate(repr(failure.original))}")
        if failure.error:
            self._line(f"  {self.BOX_V} {self._c('Assertion:', self.YELLOW)} {self._truncate(failure.error)}")
        self._line(f"  {self.BOX_V}")
        self._line(
            f"  {self.BOX_V} {failure.num_passed} passed, "
            f"{failure.shrink_steps} shrink steps, {failure.duration_ms:.0f}ms"
        )
        if failure.seed is not None:
            self._line(f"  {self.BOX_V} seed {failure.seed}, trial {failure.trial}")
        self._line(f"  {self.BOX_V}")
        self._line(f"  {self.BOX_V} {self._c('Replay bytes:', self.CYAN)}")
        for row in failure.format_replay_bytes().splitlines():
            self._line(f"  {self.BOX_V}   {row}")
        self._line(f"  {self.BOX_BL}{self.BOX_H * 58}{self.BOX_BR}")

    def _line(self, text: str) -> None:
        print(text, file=self.file)

    def _truncate(self, text: str, max_chars: int | None = None) -> str:
        """Truncate text to max_chars."""
        limit = max_chars or self.MAX_VALUE_CHARS
        if len(text) <= limit:
            return text
        return text[:limit - 3] + "..."
