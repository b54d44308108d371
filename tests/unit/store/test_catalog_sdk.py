"""Unit tests for the catalog SDK client."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.clock import ManualClock
from core.config import AnglesConfig
from core.constants import SNAPSHOT_STORAGE_KEY
from core.errors import AnglesCapacityError, AnglesImportError, AnglesStoreError
from store.catalog_sdk import AnglesClient
from store.key_value import MemoryKeyValueStorage

_PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _client(
    tmp_path: Path,
    storage: MemoryKeyValueStorage | None = None,
    max_storage_bytes: int = 4 * 1024 * 1024,
) -> AnglesClient:
    config = AnglesConfig(
        data_root=tmp_path,
        debounce_seconds=0.5,
        max_backups=5,
        max_storage_bytes=max_storage_bytes,
    )
    return AnglesClient(
        config,
        storage=storage or MemoryKeyValueStorage(),
        clock=ManualClock(),
        install_teardown=False,
    )


def test_client_edits_are_flushed_on_close(tmp_path) -> None:
    """Edits made through the client should reach storage on close."""
    storage = MemoryKeyValueStorage()
    with _client(tmp_path, storage) as client:
        client.add_hold("Zebra")
        angle = client.add_angle("zebra", value=33)

    stored = json.loads(storage.get_item(SNAPSHOT_STORAGE_KEY) or "{}")
    assert {"id": angle.angle_id, "hold": "Zebra", "value": 33.0, "saw": "main"} in stored[
        "angles"
    ]


def test_client_lists_angles_by_saw(tmp_path) -> None:
    """Seed catalog should expose two secondary-saw angles."""
    with _client(tmp_path) as client:
        stefan_angles = client.angles(saw="stefan")

    assert {angle.hold for angle in stefan_angles} == {"Avalon SuperFlat", "Amon"}


def test_client_sets_cover_from_file(tmp_path) -> None:
    """Image files should be attached as inline cover images."""
    image_path = tmp_path / "cover.png"
    image_path.write_bytes(_PNG_BYTES)
    with _client(tmp_path) as client:
        client.set_cover_from_file("Austin", str(image_path))
        cover = client.cover_image("austin")

    assert cover is not None and cover.startswith("data:image/png;base64,")


def test_client_export_then_import_restores_catalog(tmp_path) -> None:
    """An exported file should import into another store unchanged."""
    export_path = tmp_path / "angles-db.json"
    with _client(tmp_path) as source:
        source.add_hold("Exported Hold")
        source.export_to_file(str(export_path))
        expected = source.snapshot

    with _client(tmp_path) as target:
        target.remove_hold("Austin")
        imported = target.import_from_file(str(export_path))

    assert imported == expected


def test_client_import_rejects_invalid_json(tmp_path) -> None:
    """Unparsable import files should be rejected before touching state."""
    bad_path = tmp_path / "bad.json"
    bad_path.write_text("{nope", encoding="utf-8")
    with _client(tmp_path) as client:
        before = client.snapshot
        with pytest.raises(AnglesImportError):
            client.import_from_file(str(bad_path))

        assert client.snapshot == before and client.list_backups() == []


def test_client_import_over_quota_is_rejected(tmp_path) -> None:
    """Oversized imports should fail with a capacity error."""
    with _client(tmp_path, max_storage_bytes=8 * 1024) as client:
        with pytest.raises(AnglesCapacityError):
            client.import_document({"holds": [f"Hold {index}" for index in range(2000)]})


def test_client_restore_backup_reverts_import(tmp_path) -> None:
    """Restoring the newest backup should bring back pre-import state."""
    with _client(tmp_path) as client:
        original = client.snapshot
        client.import_document({"holds": ["Only"], "angles": []})
        restored = client.restore_backup(0)

        assert restored == original and len(client.list_backups()) == 2


def test_client_restore_missing_backup_raises(tmp_path) -> None:
    """Restoring a backup index that does not exist should fail."""
    with _client(tmp_path) as client:
        with pytest.raises(AnglesStoreError):
            client.restore_backup(3)


def test_client_persists_each_edit_once_its_window_expires(tmp_path) -> None:
    """Edits separated by idle windows should reach storage without a close."""
    storage = MemoryKeyValueStorage()
    clock = ManualClock()
    config = AnglesConfig(
        data_root=tmp_path,
        debounce_seconds=0.5,
        max_backups=5,
        max_storage_bytes=4 * 1024 * 1024,
    )
    client = AnglesClient(config, storage=storage, clock=clock, install_teardown=False).open()

    client.add_hold("First Window")
    clock.advance(1.0)
    client.add_hold("Second Window")
    clock.advance(1.0)
    holds_seen = client.holds()

    stored = json.loads(storage.get_item(SNAPSHOT_STORAGE_KEY) or "{}")
    assert {"First Window", "Second Window"} <= set(holds_seen)
    assert {"First Window", "Second Window"} <= set(stored["holds"])
    assert client.store.scheduler.pending is None
