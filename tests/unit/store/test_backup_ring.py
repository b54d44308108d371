"""Unit tests for the bounded backup ring."""

from __future__ import annotations

import pytest

from core.clock import ManualClock
from core.constants import BACKUPS_STORAGE_KEY
from core.types import CanonicalSnapshot
from store.backup_ring import BackupRing
from store.key_value import MemoryKeyValueStorage


def test_push_keeps_newest_entries_first() -> None:
    """Seven pushes into a ring of five should keep the five newest."""
    clock = ManualClock(wall_start_ms=0)
    ring = BackupRing(MemoryKeyValueStorage(), clock, max_entries=5)
    for index in range(1, 8):
        clock.advance(1.0)
        ring.push(CanonicalSnapshot(holds=(f"H{index}",)))

    entries = ring.entries()

    assert [entry.data["holds"] for entry in entries] == [["H7"], ["H6"], ["H5"], ["H4"], ["H3"]]
    assert [entry.timestamp_ms for entry in entries] == [7000, 6000, 5000, 4000, 3000]


def test_push_failure_is_reported_not_raised() -> None:
    """A full storage should make push return False without raising."""
    ring = BackupRing(MemoryKeyValueStorage(quota_bytes=16), ManualClock())

    assert ring.push(CanonicalSnapshot(holds=("Austin",))) is False
    assert ring.entries() == []


def test_entries_tolerate_corrupt_storage() -> None:
    """Unparsable ring payloads should read as an empty ring."""
    storage = MemoryKeyValueStorage()
    storage.set_item(BACKUPS_STORAGE_KEY, "{not json")

    assert BackupRing(storage, ManualClock()).entries() == []


def test_entries_skip_malformed_items() -> None:
    """Items without data or with a bad timestamp should be skipped."""
    storage = MemoryKeyValueStorage()
    storage.set_item(
        BACKUPS_STORAGE_KEY,
        '[{"ts": 5, "data": {}}, {"ts": "x", "data": {}}, {"ts": 1}, 3]',
    )

    assert [entry.timestamp_ms for entry in BackupRing(storage, ManualClock()).entries()] == [5]


def test_clear_removes_all_entries() -> None:
    """Clearing should empty the ring."""
    ring = BackupRing(MemoryKeyValueStorage(), ManualClock())
    ring.push(CanonicalSnapshot())

    ring.clear()

    assert ring.entries() == []


def test_ring_requires_a_slot() -> None:
    """A ring without capacity is a configuration error."""
    with pytest.raises(ValueError):
        BackupRing(MemoryKeyValueStorage(), ManualClock(), max_entries=0)
