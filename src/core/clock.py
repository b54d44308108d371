"""Injectable clocks for scheduling and timestamps.

This module separates monotonic scheduling time from wall-clock stamps.
Tests drive a ManualClock so debounce timing is fully deterministic.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Time source required by the write scheduler and backup ring."""

    def monotonic(self) -> float: ...

    def wall_time_ms(self) -> int: ...


class SystemClock:
    """Clock backed by the process monotonic and wall clocks."""

    def monotonic(self) -> float:
        """Return monotonic seconds for deadline arithmetic."""
        return time.monotonic()

    def wall_time_ms(self) -> int:
        """Return epoch milliseconds for persisted timestamps."""
        return int(time.time() * 1000)


class ManualClock:
    """Clock that only moves when advanced explicitly."""

    def __init__(self, start_seconds: float = 0.0, wall_start_ms: int = 1_700_000_000_000) -> None:
        self._elapsed = start_seconds
        self._wall_start_ms = wall_start_ms

    def monotonic(self) -> float:
        return self._elapsed

    def wall_time_ms(self) -> int:
        return self._wall_start_ms + int(round(self._elapsed * 1000))

    def advance(self, seconds: float) -> None:
        """Move the clock forward.

        Args:
            seconds: Non-negative number of seconds to advance.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot move a clock backwards by {seconds} seconds.")
        self._elapsed += seconds

    def set(self, seconds: float) -> None:
        """Jump to an absolute monotonic time no earlier than now."""
        if seconds < self._elapsed:
            raise ValueError(f"Cannot move a clock backwards to {seconds} seconds.")
        self._elapsed = seconds
