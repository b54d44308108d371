"""Debounced write coalescing for snapshot persistence.

The scheduler is a two-state machine: idle, or holding exactly one
pending snapshot with a deadline. A new snapshot replaces the pending
one wholesale and restarts the quiet period, so intermediate snapshots
are never written and an older snapshot can never land after a newer
one. A due write fires on the next poll or schedule call, whichever
comes first; the SDK client polls on every read and edit, and teardown
calls flush.

A flush on teardown is synchronous and best effort. A hard kill loses
the pending snapshot, which holds at most one quiet period of edits as
long as the host polls at least once per quiet period.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from core.clock import Clock
from core.constants import DEFAULT_DEBOUNCE_MS
from core.logging_config import get_logger
from core.types import CanonicalSnapshot

_LOGGER = get_logger(__name__)


class SchedulerState(str, Enum):
    """Write scheduler states."""

    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class PendingWrite:
    """The single snapshot waiting for its quiet period to end."""

    snapshot: CanonicalSnapshot
    scheduled_at: float
    deadline: float


class WriteScheduler:
    """Coalesce rapid snapshot replacements into one durable write."""

    def __init__(
        self,
        clock: Clock,
        write: Callable[[CanonicalSnapshot], None],
        delay_seconds: float = DEFAULT_DEBOUNCE_MS / 1000.0,
    ) -> None:
        """Initialize an idle scheduler.

        Args:
            clock: Monotonic time source for deadlines.
            write: Durable write callback for one snapshot.
            delay_seconds: Quiet period after the latest schedule call.
        """
        if delay_seconds < 0:
            raise ValueError(f"Debounce delay must be non-negative, got {delay_seconds}.")
        self._clock = clock
        self._write = write
        self._delay_seconds = delay_seconds
        self._pending: PendingWrite | None = None
        self._write_count = 0

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.IDLE if self._pending is None else SchedulerState.PENDING

    @property
    def pending(self) -> PendingWrite | None:
        return self._pending

    @property
    def write_count(self) -> int:
        return self._write_count

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    def schedule(self, snapshot: CanonicalSnapshot) -> PendingWrite:
        """Replace the pending snapshot and restart the quiet period.

        A pending snapshot whose deadline already passed is written first,
        so a stream of edits cannot postpone a due write indefinitely.

        Args:
            snapshot: Latest canonical snapshot to persist.

        Returns:
            The new pending write.
        """
        self.poll()
        now = self._clock.monotonic()
        replaced = self._pending is not None
        self._pending = PendingWrite(
            snapshot=snapshot,
            scheduled_at=now,
            deadline=now + self._delay_seconds,
        )
        _LOGGER.debug("write_scheduled", deadline=self._pending.deadline, coalesced=replaced)
        return self._pending

    def poll(self) -> bool:
        """Write the pending snapshot if its deadline has passed.

        Returns:
            True when a write was performed.
        """
        if self._pending is None or self._clock.monotonic() < self._pending.deadline:
            return False
        return self._fire()

    def flush(self) -> bool:
        """Write the pending snapshot now and cancel its deadline.

        Returns:
            True when a write was performed, False when idle.
        """
        if self._pending is None:
            return False
        return self._fire()

    def seconds_until_due(self) -> float | None:
        """Return remaining quiet time, or None when idle."""
        if self._pending is None:
            return None
        return max(0.0, self._pending.deadline - self._clock.monotonic())

    def _fire(self) -> bool:
        pending = self._pending
        if pending is None:
            return False
        self._pending = None
        self._write(pending.snapshot)
        self._write_count += 1
        return True
