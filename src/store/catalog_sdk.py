"""Python SDK for catalog operations.

This module exposes high-level APIs for editing holds and angles,
import and export, and backup recovery on top of the persistence store.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

from core.clock import Clock, SystemClock
from core.config import AnglesConfig
from core.constants import DEFAULT_MAX_IMAGE_BYTES
from core.errors import AnglesStoreError
from core.logging_config import get_logger
from core.types import Angle, BackupEntry, CanonicalSnapshot, JsonValue
from store import catalog_edits
from store.catalog_edits import UNSET, Unset
from store.image_encoding import encode_image_file
from store.import_export import read_import_file, write_export_file
from store.key_value import FileKeyValueStorage, KeyValueStorage
from store.persistence_store import PersistenceStore
from store.teardown import TeardownFlush

_LOGGER = get_logger(__name__)


class AnglesClient:
    """Primary SDK entry point owning one persistence store."""

    def __init__(
        self,
        config: AnglesConfig | None = None,
        storage: KeyValueStorage | None = None,
        clock: Clock | None = None,
        install_teardown: bool = True,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            storage: Optional storage backend; files under data_root by default.
            clock: Optional time source; the system clock by default.
            install_teardown: Flush pending writes on exit and SIGTERM.
        """
        self._config = config or AnglesConfig.from_env()
        self._clock = clock or SystemClock()
        backend = storage or FileKeyValueStorage(self._config.data_root)
        self._store = PersistenceStore(backend, self._config, self._clock)
        self._teardown = TeardownFlush(self._store) if install_teardown else None

    @property
    def store(self) -> PersistenceStore:
        return self._store

    @property
    def snapshot(self) -> CanonicalSnapshot:
        """Return the current snapshot, first writing any overdue pending one."""
        self._store.poll()
        return self._store.snapshot

    def open(self) -> "AnglesClient":
        """Load the store and arm the teardown flush."""
        self._store.open()
        if self._teardown is not None:
            self._teardown.install()
        return self

    def close(self) -> None:
        """Flush pending writes and release the teardown hooks."""
        self._store.close()
        if self._teardown is not None:
            self._teardown.uninstall()

    def __enter__(self) -> "AnglesClient":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def poll(self) -> bool:
        """Give the write scheduler a chance to persist a due snapshot."""
        return self._store.poll()

    def flush(self) -> bool:
        return self._store.flush()

    def replace_snapshot(self, snapshot: CanonicalSnapshot) -> CanonicalSnapshot:
        """Swap in a whole snapshot without taking a backup."""
        return self._store.replace(snapshot)

    def holds(self) -> tuple[str, ...]:
        return self.snapshot.holds

    def angles(self, hold: str | None = None, saw: str | None = None) -> list[Angle]:
        """List angles, optionally for one hold and one saw category."""
        if hold is not None:
            return catalog_edits.angles_for_hold(self.snapshot, hold, saw)
        return [angle for angle in self.snapshot.angles if saw is None or angle.saw == saw]

    def cover_image(self, hold: str) -> str | None:
        snapshot = self.snapshot
        return snapshot.hold_images.get(catalog_edits.resolve_hold(snapshot, hold))

    def add_hold(self, name: str) -> str:
        """Add a hold and return its stored name."""
        updated, hold_name = catalog_edits.add_hold(self.snapshot, name)
        self._store.replace(updated)
        return hold_name

    def rename_hold(self, old_name: str, new_name: str) -> str:
        """Rename a hold and return its stored new name."""
        updated, hold_name = catalog_edits.rename_hold(self.snapshot, old_name, new_name)
        self._store.replace(updated)
        return hold_name

    def remove_hold(self, name: str) -> int:
        """Remove a hold and return how many angles went with it."""
        updated, removed_count = catalog_edits.remove_hold(self.snapshot, name)
        self._store.replace(updated)
        return removed_count

    def add_angle(self, hold: str, saw: str | None = None, value: JsonValue = 0) -> Angle:
        """Add an angle to a hold and return it."""
        updated, angle = catalog_edits.add_angle(self.snapshot, hold, saw, value)
        self._store.replace(updated)
        return angle

    def update_angle(
        self,
        angle_id: str,
        *,
        value: JsonValue | Unset = UNSET,
        saw: JsonValue | Unset = UNSET,
        drawing: JsonValue | Unset = UNSET,
    ) -> Angle:
        """Patch an angle and return its new state."""
        updated, angle = catalog_edits.update_angle(
            self.snapshot, angle_id, value=value, saw=saw, drawing=drawing
        )
        self._store.replace(updated)
        return angle

    def remove_angle(self, angle_id: str) -> None:
        self._store.replace(catalog_edits.remove_angle(self.snapshot, angle_id))

    def set_drawing_from_file(
        self, angle_id: str, image_path: str, max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    ) -> Angle:
        """Attach an image file as an angle's drawing."""
        image_ref = encode_image_file(Path(image_path), max_bytes)
        return self.update_angle(angle_id, drawing=image_ref)

    def set_cover_image(self, hold: str, image_ref: str) -> None:
        self._store.replace(catalog_edits.set_cover_image(self.snapshot, hold, image_ref))

    def set_cover_from_file(
        self, hold: str, image_path: str, max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    ) -> None:
        """Attach an image file as a hold's cover image."""
        self.set_cover_image(hold, encode_image_file(Path(image_path), max_bytes))

    def remove_cover_image(self, hold: str) -> None:
        self._store.replace(catalog_edits.remove_cover_image(self.snapshot, hold))

    def export_to_file(self, output_path: str) -> Path:
        """Write the current snapshot as an export envelope file.

        Args:
            output_path: Destination file path.

        Returns:
            Resolved written path.
        """
        written_path = write_export_file(Path(output_path), self.snapshot, self._clock)
        _LOGGER.info("export_written", path=str(written_path))
        return written_path

    def import_document(self, raw_document: JsonValue) -> CanonicalSnapshot:
        """Replace the catalog with an already parsed document.

        Raises:
            AnglesCapacityError: If the sanitized document is over the ceiling.
        """
        return self._store.replace_from_import(raw_document)

    def import_from_file(self, input_path: str) -> CanonicalSnapshot:
        """Replace the catalog with the contents of an import file.

        Raises:
            AnglesImportError: If the file cannot be read or parsed.
            AnglesCapacityError: If the sanitized document is over the ceiling.
        """
        return self.import_document(read_import_file(Path(input_path)))

    def list_backups(self) -> list[BackupEntry]:
        return self._store.backups.entries()

    def restore_backup(self, index: int = 0) -> CanonicalSnapshot:
        """Replace the catalog with a backup entry, newest first.

        The current catalog is itself backed up first.

        Raises:
            AnglesStoreError: If no backup exists at that index.
        """
        entries = self.list_backups()
        if not 0 <= index < len(entries):
            raise AnglesStoreError(
                f"No backup at index {index}; {len(entries)} backup(s) available."
            )
        return self._store.replace_from_import(entries[index].data)

    def last_modified(self) -> int | None:
        return self._store.last_modified()

    def format_last_modified(self) -> str:
        """Return the last-modified marker formatted for display."""
        return catalog_edits.format_last_modified(self.last_modified())
