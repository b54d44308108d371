"""Single ingestion funnel from raw documents to canonical snapshots.

Every external write (initial load, import, repair) passes through
migrate. It never raises for odd shapes; it degrades to seed defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable

from core.constants import CURRENT_SCHEMA_VERSION
from core.types import CanonicalSnapshot, JsonValue
from sanitize.sanitizer import sanitize_angle_list, sanitize_cover_images, sanitize_holds
from sanitize.seed_data import default_angle_payload, default_hold_payload
from store.snapshot_payload import snapshot_to_payload

SchemaMigration = Callable[[Mapping[str, JsonValue]], Mapping[str, JsonValue]]

# Keyed by the schema version a step upgrades from. Register a step here
# when CURRENT_SCHEMA_VERSION is bumped; each step returns a payload
# shaped like the next version.
MIGRATIONS: dict[int, SchemaMigration] = {}


def migrate(raw_document: JsonValue | CanonicalSnapshot) -> CanonicalSnapshot:
    """Produce a canonical snapshot from any parsed document.

    Accepts a bare store payload, an export envelope whose ``data`` field
    holds the store, an existing snapshot, or anything else JSON can
    express. Missing or mis-shaped holds and angles fall back to the seed
    catalog; the schema version is always re-stamped.

    Args:
        raw_document: Untrusted parsed JSON value or a snapshot.

    Returns:
        Canonical snapshot with referential integrity enforced.
    """
    if isinstance(raw_document, CanonicalSnapshot):
        raw_document = snapshot_to_payload(raw_document)
    document = _upgrade_schema(unwrap_document(raw_document))
    raw_holds = document.get("holds")
    if not isinstance(raw_holds, list):
        raw_holds = default_hold_payload()
    holds = sanitize_holds(raw_holds)
    raw_angles = document.get("angles")
    if not isinstance(raw_angles, list):
        raw_angles = default_angle_payload()
    angles = sanitize_angle_list(raw_angles, frozenset(holds))
    hold_images = sanitize_cover_images(document.get("holdImages"), holds)
    return CanonicalSnapshot(
        version=CURRENT_SCHEMA_VERSION,
        holds=tuple(holds),
        angles=tuple(angles),
        hold_images=hold_images,
    )


def unwrap_document(raw_document: JsonValue) -> Mapping[str, JsonValue]:
    """Return the store object inside an export envelope, if any.

    Args:
        raw_document: Untrusted parsed JSON value.

    Returns:
        The nested ``data`` object when present, the input object
        otherwise, or an empty mapping for non-object input.
    """
    if not isinstance(raw_document, Mapping):
        return {}
    nested = raw_document.get("data")
    if isinstance(nested, Mapping):
        return nested
    return raw_document


def _upgrade_schema(document: Mapping[str, JsonValue]) -> Mapping[str, JsonValue]:
    declared_version = _declared_version(document)
    for source_version in sorted(MIGRATIONS):
        if declared_version <= source_version < CURRENT_SCHEMA_VERSION:
            document = MIGRATIONS[source_version](document)
    return document


def _declared_version(document: Mapping[str, JsonValue]) -> int:
    raw_version = document.get("version")
    if isinstance(raw_version, int) and not isinstance(raw_version, bool):
        return raw_version
    return CURRENT_SCHEMA_VERSION
