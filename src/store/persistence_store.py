"""Owner of the in-memory canonical snapshot and its durable slot.

This module loads, heals, and replaces the single store snapshot.
Every replacement passes through the migrator and the quota guard
before it reaches the write scheduler.
"""

from __future__ import annotations

import json
from types import TracebackType

from core.clock import Clock, SystemClock
from core.config import AnglesConfig
from core.constants import LAST_MODIFIED_STORAGE_KEY, SNAPSHOT_STORAGE_KEY
from core.errors import AnglesCapacityError, AnglesStorageError, AnglesStoreError
from core.logging_config import get_logger
from core.types import CanonicalSnapshot, JsonValue
from sanitize.seed_data import default_document
from store.backup_ring import BackupRing
from store.key_value import FileKeyValueStorage, KeyValueStorage
from store.migrator import migrate
from store.quota_guard import QuotaGuard
from store.snapshot_payload import serialize_snapshot
from store.write_scheduler import WriteScheduler

_LOGGER = get_logger(__name__)


class PersistenceStore:
    """Single owned store with an explicit open/close lifecycle.

    The store is the only writer of the snapshot slot. Writes are routed
    through a debounced scheduler; close performs the forced flush.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        config: AnglesConfig,
        clock: Clock | None = None,
    ) -> None:
        """Initialize a closed store.

        Args:
            storage: Durable key-value storage.
            config: Runtime configuration with limits and debounce window.
            clock: Time source; the system clock when omitted.
        """
        self._storage = storage
        self._config = config
        self._clock = clock or SystemClock()
        self._quota_guard = QuotaGuard(config.max_storage_bytes)
        self._backups = BackupRing(storage, self._clock, config.max_backups)
        self._scheduler = WriteScheduler(
            self._clock, self._write_snapshot, config.debounce_seconds
        )
        self._snapshot: CanonicalSnapshot | None = None
        self._is_open = False
        self._last_write_error: Exception | None = None

    @classmethod
    def from_config(cls, config: AnglesConfig, clock: Clock | None = None) -> "PersistenceStore":
        """Build a store backed by files under the configured data root."""
        return cls(FileKeyValueStorage(config.data_root), config, clock)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def snapshot(self) -> CanonicalSnapshot:
        """Return the current canonical snapshot.

        Raises:
            AnglesStoreError: If the store has not been opened.
        """
        if self._snapshot is None:
            raise AnglesStoreError("Store is not open. Call open() before reading the snapshot.")
        return self._snapshot

    @property
    def scheduler(self) -> WriteScheduler:
        return self._scheduler

    @property
    def backups(self) -> BackupRing:
        return self._backups

    @property
    def quota_guard(self) -> QuotaGuard:
        return self._quota_guard

    @property
    def last_write_error(self) -> Exception | None:
        """Return the error of the most recent failed durable write, if any."""
        return self._last_write_error

    def open(self) -> CanonicalSnapshot:
        """Load the durable snapshot and start accepting replacements.

        Returns:
            The loaded canonical snapshot.
        """
        if self._is_open:
            return self.snapshot
        self._snapshot = self.load()
        self._is_open = True
        return self._snapshot

    def close(self) -> None:
        """Flush any pending write and stop accepting replacements."""
        if not self._is_open:
            return
        self.flush()
        self._is_open = False

    def __enter__(self) -> "PersistenceStore":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def load(self) -> CanonicalSnapshot:
        """Read, heal, and return the durable snapshot.

        Missing, unreadable, or unparsable storage falls back to the seed
        catalog, which is written back. A parsed payload always passes
        through the migrator and is rewritten only when healing changed it.

        Returns:
            Canonical snapshot; never raises for bad stored data.
        """
        try:
            raw_text = self._storage.get_item(SNAPSHOT_STORAGE_KEY)
        except AnglesStorageError as error:
            _LOGGER.warning("snapshot_read_failed", error=str(error))
            return self._seed_storage()
        if not raw_text:
            return self._seed_storage()
        try:
            parsed = json.loads(raw_text)
        except json.JSONDecodeError as error:
            _LOGGER.warning("snapshot_unparsable", error=error.msg)
            return self._seed_storage()
        snapshot = migrate(parsed)
        if raw_text != serialize_snapshot(snapshot):
            _LOGGER.info("snapshot_healed", hold_count=len(snapshot.holds))
            self._write_snapshot(snapshot)
        elif self.last_modified() is None:
            self._touch_last_modified()
        _LOGGER.info(
            "snapshot_loaded",
            hold_count=len(snapshot.holds),
            angle_count=len(snapshot.angles),
        )
        return snapshot

    def replace(self, next_raw: JsonValue | CanonicalSnapshot) -> CanonicalSnapshot:
        """Replace the in-memory snapshot and schedule its durable write.

        Args:
            next_raw: Candidate state in any shape the migrator accepts.

        Returns:
            The accepted canonical snapshot.

        Raises:
            AnglesStoreError: If the store is not open.
            AnglesCapacityError: If the candidate exceeds the size ceiling;
                the current snapshot is left unchanged.
        """
        self._require_open()
        candidate = migrate(next_raw)
        self._quota_guard.check_size(candidate)
        self._snapshot = candidate
        self._scheduler.schedule(candidate)
        return candidate

    def replace_from_import(self, raw_document: JsonValue | CanonicalSnapshot) -> CanonicalSnapshot:
        """Bulk-replace the store after backing up the current snapshot.

        Args:
            raw_document: Imported document or restored backup payload.

        Returns:
            The accepted canonical snapshot.

        Raises:
            AnglesStoreError: If the store is not open.
            AnglesCapacityError: If the candidate exceeds the size ceiling;
                no backup is taken and state is left unchanged.
        """
        self._require_open()
        candidate = migrate(raw_document)
        self._quota_guard.check_size(candidate)
        self._backups.push(self.snapshot)
        accepted = self.replace(candidate)
        _LOGGER.info(
            "import_applied",
            hold_count=len(accepted.holds),
            angle_count=len(accepted.angles),
        )
        return accepted

    def poll(self) -> bool:
        """Let the scheduler write if its quiet period has elapsed."""
        return self._scheduler.poll()

    def flush(self) -> bool:
        """Force any pending write to storage now."""
        return self._scheduler.flush()

    def last_modified(self) -> int | None:
        """Return the last successful write time in epoch milliseconds."""
        try:
            raw_value = self._storage.get_item(LAST_MODIFIED_STORAGE_KEY)
        except AnglesStorageError:
            return None
        if not raw_value:
            return None
        try:
            return int(float(raw_value))
        except (ValueError, OverflowError):
            return None

    def _seed_storage(self) -> CanonicalSnapshot:
        snapshot = migrate(default_document())
        self._write_snapshot(snapshot)
        return snapshot

    def _write_snapshot(self, snapshot: CanonicalSnapshot) -> None:
        serialized = serialize_snapshot(snapshot)
        try:
            size_bytes = self._quota_guard.check_serialized(serialized)
            self._storage.set_item(SNAPSHOT_STORAGE_KEY, serialized)
        except (AnglesCapacityError, AnglesStorageError) as error:
            self._last_write_error = error
            _LOGGER.error("snapshot_write_failed", error=str(error))
            return
        self._last_write_error = None
        self._touch_last_modified()
        _LOGGER.info("snapshot_written", size_bytes=size_bytes, angle_count=len(snapshot.angles))

    def _touch_last_modified(self) -> None:
        previous = self.last_modified() or 0
        marker = max(self._clock.wall_time_ms(), previous)
        try:
            self._storage.set_item(LAST_MODIFIED_STORAGE_KEY, str(marker))
        except AnglesStorageError as error:
            _LOGGER.warning("last_modified_write_failed", error=str(error))

    def _require_open(self) -> None:
        if not self._is_open:
            raise AnglesStoreError(
                "Store is closed. Open the store before replacing its snapshot."
            )
