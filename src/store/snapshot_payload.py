"""Snapshot JSON payload helpers.

This module converts typed snapshots into their wire dictionaries.
Serialization is compact and UTF-8 so size checks match stored bytes.
"""

from __future__ import annotations

import json
from typing import Any

from core.types import Angle, CanonicalSnapshot, ExportEnvelope, JsonValue


def angle_to_payload(angle: Angle) -> dict[str, JsonValue]:
    """Convert an angle into its stored object form.

    Args:
        angle: Canonical angle.

    Returns:
        Wire dictionary; ``drawing`` only present when set.
    """
    payload: dict[str, JsonValue] = {
        "id": angle.angle_id,
        "hold": angle.hold,
        "value": angle.value,
        "saw": angle.saw,
    }
    if angle.drawing is not None:
        payload["drawing"] = angle.drawing
    return payload


def snapshot_to_payload(snapshot: CanonicalSnapshot) -> dict[str, JsonValue]:
    """Convert a canonical snapshot into its stored object form.

    Args:
        snapshot: Canonical snapshot.

    Returns:
        Wire dictionary with version, holds, angles, and holdImages.
    """
    return {
        "version": snapshot.version,
        "holds": list(snapshot.holds),
        "angles": [angle_to_payload(angle) for angle in snapshot.angles],
        "holdImages": dict(snapshot.hold_images),
    }


def envelope_to_payload(envelope: ExportEnvelope) -> dict[str, JsonValue]:
    """Convert an export envelope into its file object form."""
    return {
        "app": envelope.app,
        "exportedAt": envelope.exported_at,
        "version": envelope.version,
        "data": snapshot_to_payload(envelope.data),
    }


def dumps_compact(payload: Any) -> str:
    """Serialize a payload the way it is written to storage."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def serialize_snapshot(snapshot: CanonicalSnapshot) -> str:
    """Serialize a snapshot into its stored text form."""
    return dumps_compact(snapshot_to_payload(snapshot))


def encoded_size(text: str) -> int:
    """Return the UTF-8 byte length of serialized text."""
    return len(text.encode("utf-8"))
