"""Durable key-value storage backends.

This module isolates the string-keyed storage slots the store writes.
A directory backend persists one file per key with atomic replacement.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from core.constants import STORAGE_FILE_SUFFIX
from core.errors import AnglesStorageError

_VALID_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage(Protocol):
    """String key-value slots used for snapshots, markers, and backups."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class FileKeyValueStorage:
    """Directory-backed storage with one UTF-8 file per key."""

    def __init__(self, root: Path) -> None:
        """Initialize storage under a root directory.

        Args:
            root: Directory holding the key files; created when missing.
        """
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def get_item(self, key: str) -> str | None:
        """Read one key.

        Args:
            key: Storage key.

        Returns:
            Stored text, or None when the key has never been written.

        Raises:
            AnglesStorageError: If the key file exists but cannot be read.
        """
        key_path = self._key_path(key)
        if not key_path.exists():
            return None
        try:
            return key_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise AnglesStorageError(
                f"Failed to read storage key '{key}' at {key_path}: {error}. "
                "Check file permissions or remove the corrupt file."
            ) from error

    def set_item(self, key: str, value: str) -> None:
        """Write one key atomically.

        Args:
            key: Storage key.
            value: Text to store.

        Raises:
            AnglesStorageError: If the write fails.
        """
        key_path = self._key_path(key)
        temp_path: Path | None = None
        try:
            descriptor, temp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self._root
            )
            temp_path = Path(temp_name)
            with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                handle.write(value)
            temp_path.replace(key_path)
        except OSError as error:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise AnglesStorageError(
                f"Failed to write storage key '{key}' at {key_path}: {error}. "
                "Free disk space or check permissions and retry."
            ) from error

    def remove_item(self, key: str) -> None:
        """Delete one key if present."""
        key_path = self._key_path(key)
        try:
            key_path.unlink(missing_ok=True)
        except OSError as error:
            raise AnglesStorageError(
                f"Failed to remove storage key '{key}' at {key_path}: {error}."
            ) from error

    def _key_path(self, key: str) -> Path:
        if not _VALID_KEY_PATTERN.match(key):
            raise AnglesStorageError(
                f"Invalid storage key '{key}': use letters, digits, '_', '.', or '-'."
            )
        return self._root / f"{key}{STORAGE_FILE_SUFFIX}"


class MemoryKeyValueStorage:
    """In-process storage with an optional total byte quota.

    The quota mimics a browser storage limit: a write that would push the
    total encoded size of all keys and values past it is refused.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Write one key, enforcing the quota when configured.

        Raises:
            AnglesStorageError: If the write would exceed the quota.
        """
        if self._quota_bytes is not None:
            projected = self.used_bytes() - _entry_size(key, self._items.get(key))
            projected += _entry_size(key, value)
            if projected > self._quota_bytes:
                raise AnglesStorageError(
                    f"Storage quota exceeded writing '{key}': "
                    f"{projected} bytes needed, {self._quota_bytes} available."
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._items)

    def used_bytes(self) -> int:
        return sum(_entry_size(key, value) for key, value in self._items.items())


def _entry_size(key: str, value: str | None) -> int:
    if value is None:
        return 0
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))
