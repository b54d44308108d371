"""Serialized-size ceiling for snapshots.

This module measures a candidate before it reaches durable storage so
capacity problems surface with sizes instead of opaque write failures.
"""

from __future__ import annotations

from typing import Any

from core.constants import DEFAULT_MAX_STORAGE_BYTES
from core.errors import AnglesCapacityError
from core.types import CanonicalSnapshot
from store.snapshot_payload import dumps_compact, encoded_size, serialize_snapshot


class QuotaGuard:
    """Reject snapshots whose serialized form exceeds a byte ceiling."""

    def __init__(self, limit_bytes: int = DEFAULT_MAX_STORAGE_BYTES) -> None:
        if limit_bytes <= 0:
            raise ValueError(f"Quota limit must be positive, got {limit_bytes}.")
        self._limit_bytes = limit_bytes

    @property
    def limit_bytes(self) -> int:
        return self._limit_bytes

    def measure(self, candidate: CanonicalSnapshot | Any) -> int:
        """Return the UTF-8 size of the candidate's stored form.

        Args:
            candidate: Snapshot or JSON-serializable payload.

        Returns:
            Serialized size in bytes.
        """
        if isinstance(candidate, CanonicalSnapshot):
            return encoded_size(serialize_snapshot(candidate))
        return encoded_size(dumps_compact(candidate))

    def check_size(self, candidate: CanonicalSnapshot | Any) -> int:
        """Validate the candidate against the ceiling.

        Args:
            candidate: Snapshot or JSON-serializable payload.

        Returns:
            Serialized size in bytes when within the ceiling.

        Raises:
            AnglesCapacityError: If the serialized size exceeds the ceiling.
        """
        return self._enforce(self.measure(candidate))

    def check_serialized(self, serialized: str) -> int:
        """Validate already-serialized text against the ceiling.

        Raises:
            AnglesCapacityError: If the encoded text exceeds the ceiling.
        """
        return self._enforce(encoded_size(serialized))

    def _enforce(self, size_bytes: int) -> int:
        if size_bytes > self._limit_bytes:
            raise AnglesCapacityError(
                f"Storage full: {_format_kb(size_bytes)} (max {_format_kb(self._limit_bytes)}). "
                "Remove some drawings or cover images, or use smaller images.",
                size_bytes=size_bytes,
                limit_bytes=self._limit_bytes,
            )
        return size_bytes


def _format_kb(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.0f}KB"
