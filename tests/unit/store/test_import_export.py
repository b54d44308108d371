"""Unit tests for export and import file IO."""

from __future__ import annotations

import json

import pytest

from core.clock import ManualClock
from core.errors import AnglesImportError
from core.types import Angle, CanonicalSnapshot
from store.import_export import (
    build_export_envelope,
    format_iso_timestamp,
    parse_import_text,
    read_import_file,
    write_export_file,
)


def _snapshot() -> CanonicalSnapshot:
    return CanonicalSnapshot(
        holds=("Ústí",),
        angles=(Angle(angle_id="a1", hold="Ústí", value=12.5, saw="stefan"),),
    )


def test_write_export_file_uses_envelope_shape(tmp_path) -> None:
    """Export files should wrap the store in the app envelope."""
    clock = ManualClock(wall_start_ms=1_700_000_000_000)
    output_path = write_export_file(tmp_path / "nested" / "angles-db.json", _snapshot(), clock)

    payload = json.loads(output_path.read_text(encoding="utf-8"))

    assert {key: payload[key] for key in ("app", "exportedAt", "version")} == {
        "app": "AnglesProto",
        "exportedAt": "2023-11-14T22:13:20.000Z",
        "version": 1,
    }
    assert payload["data"]["angles"] == [
        {"id": "a1", "hold": "Ústí", "value": 12.5, "saw": "stefan"}
    ]


def test_export_file_keeps_non_ascii_text(tmp_path) -> None:
    """Hold names should be written as UTF-8 text, not escapes."""
    output_path = write_export_file(tmp_path / "out.json", _snapshot(), ManualClock())

    assert "Ústí" in output_path.read_text(encoding="utf-8")


def test_build_export_envelope_resanitizes_snapshot() -> None:
    """Envelope data should pass through the migrator."""
    dirty = CanonicalSnapshot(
        holds=("b", "a"), angles=(Angle(angle_id="x", hold="gone", value=1.0),)
    )

    envelope = build_export_envelope(dirty, ManualClock())

    assert envelope.data.holds == ("a", "b") and envelope.data.angles == ()


def test_read_import_file_missing_path_raises(tmp_path) -> None:
    """Unreadable import files should raise an import error."""
    with pytest.raises(AnglesImportError, match="cannot read"):
        read_import_file(tmp_path / "missing.json")


def test_parse_import_text_reports_line() -> None:
    """Invalid JSON should be reported with its line number."""
    with pytest.raises(AnglesImportError, match="line 2"):
        parse_import_text('{\n  "holds": [,]\n}')


def test_parse_import_text_accepts_any_json_shape() -> None:
    """Shape checks belong to the migrator, not the parser."""
    assert parse_import_text("[1, 2]") == [1, 2]


def test_format_iso_timestamp_keeps_milliseconds() -> None:
    """Timestamps should be UTC with a Z suffix and milliseconds."""
    assert format_iso_timestamp(1_700_000_000_123) == "2023-11-14T22:13:20.123Z"
