"""Export and import file IO.

This module writes export envelopes and reads untrusted import files.
Read and parse failures are the only hard import rejections here.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from core.clock import Clock
from core.constants import CURRENT_SCHEMA_VERSION, EXPORT_APP_NAME
from core.errors import AnglesImportError, AnglesStorageError
from core.types import CanonicalSnapshot, ExportEnvelope, JsonValue
from store.migrator import migrate
from store.snapshot_payload import envelope_to_payload


def build_export_envelope(snapshot: CanonicalSnapshot, clock: Clock) -> ExportEnvelope:
    """Wrap a re-sanitized snapshot in the export envelope.

    Args:
        snapshot: Snapshot to export.
        clock: Source of the export timestamp.

    Returns:
        Export envelope ready for serialization.
    """
    return ExportEnvelope(
        app=EXPORT_APP_NAME,
        exported_at=format_iso_timestamp(clock.wall_time_ms()),
        version=CURRENT_SCHEMA_VERSION,
        data=migrate(snapshot),
    )


def write_export_file(output_path: Path, snapshot: CanonicalSnapshot, clock: Clock) -> Path:
    """Write an export envelope as pretty-printed JSON.

    Args:
        output_path: Destination file path.
        snapshot: Snapshot to export.
        clock: Source of the export timestamp.

    Returns:
        Resolved path of the written file.

    Raises:
        AnglesStorageError: If the file cannot be written.
    """
    envelope = build_export_envelope(snapshot, clock)
    payload = envelope_to_payload(envelope)
    resolved_path = output_path.expanduser().resolve()
    try:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
        resolved_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
    except OSError as error:
        raise AnglesStorageError(
            f"Failed to write export file at {resolved_path}: {error}. "
            "Choose a writable location and retry."
        ) from error
    return resolved_path


def read_import_file(input_path: Path) -> JsonValue:
    """Read and parse an import file without interpreting its shape.

    Args:
        input_path: File to import.

    Returns:
        Parsed JSON value.

    Raises:
        AnglesImportError: If the file cannot be read or is not valid JSON.
    """
    resolved_path = input_path.expanduser().resolve()
    try:
        text = resolved_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise AnglesImportError(
            f"Import failed: cannot read {resolved_path}: {error}."
        ) from error
    return parse_import_text(text, source=str(resolved_path))


def parse_import_text(text: str, source: str = "<input>") -> JsonValue:
    """Parse import text as JSON.

    Raises:
        AnglesImportError: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        raise AnglesImportError(
            f"Import failed: invalid JSON in {source} at line {error.lineno}: {error.msg}."
        ) from error


def format_iso_timestamp(timestamp_ms: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC string with ``Z``."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
