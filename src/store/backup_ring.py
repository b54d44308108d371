"""Bounded rotating log of pre-import snapshots.

This module keeps the most recent snapshots taken before risky bulk
replaces. Backup failures are logged and never block the replace.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping

from core.clock import Clock
from core.constants import BACKUPS_STORAGE_KEY, DEFAULT_MAX_BACKUPS
from core.errors import AnglesStorageError
from core.logging_config import get_logger
from core.types import BackupEntry, CanonicalSnapshot, JsonValue
from store.key_value import KeyValueStorage
from store.snapshot_payload import dumps_compact, snapshot_to_payload

_LOGGER = get_logger(__name__)


class BackupRing:
    """Newest-first backup list stored under one key."""

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Clock,
        max_entries: int = DEFAULT_MAX_BACKUPS,
    ) -> None:
        """Initialize the ring.

        Args:
            storage: Durable key-value storage.
            clock: Source of entry timestamps.
            max_entries: Maximum number of entries retained.
        """
        if max_entries < 1:
            raise ValueError(f"Backup ring needs at least one slot, got {max_entries}.")
        self._storage = storage
        self._clock = clock
        self._max_entries = max_entries

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def push(self, snapshot: CanonicalSnapshot) -> bool:
        """Prepend a snapshot and evict the oldest entries beyond the bound.

        Args:
            snapshot: Current canonical state to preserve.

        Returns:
            True when the ring was persisted, False when the write failed.
        """
        timestamp_ms = self._clock.wall_time_ms()
        try:
            existing = self._read_payloads()
            entry: JsonValue = {"ts": timestamp_ms, "data": snapshot_to_payload(snapshot)}
            payloads = [entry, *existing][: self._max_entries]
            self._storage.set_item(BACKUPS_STORAGE_KEY, dumps_compact(payloads))
        except AnglesStorageError as error:
            _LOGGER.warning("backup_failed", error=str(error))
            return False
        _LOGGER.info("backup_pushed", timestamp_ms=timestamp_ms, entry_count=len(payloads))
        return True

    def entries(self) -> list[BackupEntry]:
        """Return stored entries, newest first.

        Raises:
            AnglesStorageError: If the backup key cannot be read.
        """
        return [
            BackupEntry(timestamp_ms=int(payload["ts"]), data=payload["data"])
            for payload in self._read_payloads()
        ]

    def clear(self) -> None:
        """Remove every backup entry."""
        self._storage.remove_item(BACKUPS_STORAGE_KEY)

    def _read_payloads(self) -> list[dict[str, JsonValue]]:
        raw_text = self._storage.get_item(BACKUPS_STORAGE_KEY)
        if not raw_text:
            return []
        try:
            parsed = json.loads(raw_text)
        except json.JSONDecodeError as error:
            _LOGGER.warning("backup_ring_unreadable", error=error.msg)
            return []
        if not isinstance(parsed, list):
            return []
        return [dict(item) for item in parsed if _is_entry_payload(item)]


def _is_entry_payload(item: JsonValue) -> bool:
    if not isinstance(item, Mapping) or "data" not in item:
        return False
    timestamp = item.get("ts")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return False
    return math.isfinite(timestamp)
