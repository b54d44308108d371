"""Forced flush on process teardown.

This module hooks a store flush into interpreter exit and SIGTERM so a
pending debounced write is not lost when the process is asked to stop.
The flush is synchronous and best effort: a hard kill before it returns
still loses edits from at most one debounce interval.
"""

from __future__ import annotations

import atexit
import signal
from types import FrameType
from typing import Any, Protocol

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class Flushable(Protocol):
    """Anything holding a pending write that can be forced out."""

    def flush(self) -> bool: ...


class TeardownFlush:
    """Flush a store when the process exits or receives SIGTERM."""

    def __init__(self, target: Flushable) -> None:
        self._target = target
        self._installed = False
        self._signal_installed = False
        self._previous_handler: Any = None

    @property
    def installed(self) -> bool:
        return self._installed

    def __call__(self) -> bool:
        """Run the forced flush.

        Returns:
            True when a pending write was flushed.
        """
        flushed = self._target.flush()
        if flushed:
            _LOGGER.info("teardown_flushed")
        return flushed

    def install(self) -> None:
        """Register the flush with atexit and chain a SIGTERM handler."""
        if self._installed:
            return
        atexit.register(self)
        try:
            self._previous_handler = signal.getsignal(signal.SIGTERM)
            signal.signal(signal.SIGTERM, self._handle_signal)
            self._signal_installed = True
        except ValueError:
            # Signal handlers can only be installed from the main thread.
            self._previous_handler = None
            _LOGGER.debug("teardown_signal_skipped")
        self._installed = True

    def uninstall(self) -> None:
        """Remove the atexit hook and restore the previous SIGTERM handler."""
        if not self._installed:
            return
        atexit.unregister(self)
        if self._signal_installed:
            # getsignal returns None for handlers not installed from Python.
            previous = self._previous_handler
            try:
                signal.signal(signal.SIGTERM, signal.SIG_DFL if previous is None else previous)
            except ValueError:
                _LOGGER.debug("teardown_signal_restore_skipped")
        self._signal_installed = False
        self._previous_handler = None
        self._installed = False

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        self()
        previous = self._previous_handler
        if callable(previous):
            previous(signum, frame)
            return
        if previous == signal.SIG_IGN:
            return
        raise SystemExit(128 + signum)
