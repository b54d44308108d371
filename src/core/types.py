"""Shared typed models.

This module defines immutable data models used by the sanitizer,
migrator, persistence store, and SDK layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Union

from core.constants import CURRENT_SCHEMA_VERSION, SAW_PRIMARY

JsonValue = Union[None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]]
SawCategory = Literal["main", "stefan"]


@dataclass(frozen=True)
class Angle:
    """One angle measurement attached to a hold.

    Attributes:
        angle_id: Opaque unique identifier.
        hold: Canonical name of the owning hold.
        value: Measurement in degrees within [0, 90].
        saw: Category tag, primary ("main") or secondary ("stefan").
        drawing: Optional inline image reference.
    """

    angle_id: str
    hold: str
    value: float
    saw: SawCategory = SAW_PRIMARY
    drawing: str | None = None


@dataclass(frozen=True)
class CanonicalSnapshot:
    """Well-formed store state, the only unit written to storage.

    Attributes:
        version: Schema version, always stamped by the migrator.
        holds: Sorted, case-insensitively unique hold names.
        angles: Angles whose hold references resolve into holds.
        hold_images: Cover image per hold name.
    """

    version: int = CURRENT_SCHEMA_VERSION
    holds: tuple[str, ...] = ()
    angles: tuple[Angle, ...] = ()
    hold_images: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BackupEntry:
    """One immutable backup ring entry.

    Attributes:
        timestamp_ms: Epoch milliseconds when the backup was taken.
        data: Raw snapshot payload as stored in the ring.
    """

    timestamp_ms: int
    data: JsonValue


@dataclass(frozen=True)
class ExportEnvelope:
    """Export file wrapper around a canonical snapshot.

    Attributes:
        app: Producing application marker.
        exported_at: ISO-8601 export timestamp.
        version: Schema version of the wrapped snapshot.
        data: Snapshot being exported.
    """

    app: str
    exported_at: str
    version: int
    data: CanonicalSnapshot
