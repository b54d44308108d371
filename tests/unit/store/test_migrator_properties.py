"""Property tests for the snapshot migrator.

Generated documents mix plausible catalog data with arbitrary JSON so
the canonical-form guarantees are checked far beyond hand-picked cases.
"""

from __future__ import annotations

import json
import math

from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from core.constants import ANGLE_MAX_VALUE, ANGLE_MIN_VALUE, CURRENT_SCHEMA_VERSION
from core.types import CanonicalSnapshot
from sanitize.normalizer import hold_key
from store.migrator import migrate
from store.snapshot_payload import serialize_snapshot, snapshot_to_payload

_IMAGE = "data:image/png;base64,AAAA"
_HOLD_SPELLINGS = ["Amon", "amon", "  AMON ", "Zebra   Wall", "zebra wall", "Émile", "emile"]

# =============================================================================
# STRATEGIES
# =============================================================================

json_values = st.recursive(
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=True, allow_infinity=True)
    | st.text(max_size=8),
    lambda children: st.lists(children, max_size=4)
    | st.dictionaries(st.text(max_size=6), children, max_size=4),
    max_leaves=12,
)

hold_values = st.one_of(st.sampled_from(_HOLD_SPELLINGS), st.text(max_size=6), json_values)


@composite
def raw_angles(draw, hold_refs):
    """Angle objects with a mix of valid and broken fields."""
    return {
        "id": draw(st.one_of(st.sampled_from(["a1", "a2", "a3"]), json_values)),
        "hold": draw(st.one_of(st.sampled_from(hold_refs), json_values)),
        "value": draw(
            st.one_of(
                st.floats(allow_nan=True, allow_infinity=True),
                st.integers(min_value=-1000, max_value=1000),
                st.sampled_from(["12,5", " 45.0 ", "", "abc", "1_0"]),
                st.booleans(),
                st.none(),
            )
        ),
        "saw": draw(st.sampled_from(["main", "stefan", "Stefan", "other", None])),
        "drawing": draw(st.one_of(st.just(_IMAGE), st.none(), st.text(max_size=6))),
    }


@composite
def documents(draw):
    """Store payloads, sometimes partial and sometimes wrapped for export."""
    holds = draw(st.lists(hold_values, max_size=6))
    hold_refs = [hold for hold in holds if isinstance(hold, str)] + ["Amon"]
    document = {
        "version": draw(st.one_of(st.integers(min_value=0, max_value=3), json_values)),
        "holds": holds,
        "angles": draw(st.lists(raw_angles(hold_refs), max_size=8)),
        "holdImages": draw(
            st.dictionaries(
                st.one_of(st.sampled_from(hold_refs), st.text(max_size=6)),
                st.one_of(st.just(_IMAGE), json_values),
                max_size=4,
            )
        ),
    }
    for key in draw(st.sets(st.sampled_from(["version", "holds", "angles", "holdImages"]))):
        del document[key]
    if draw(st.booleans()):
        return {
            "app": "AnglesProto",
            "exportedAt": "2024-01-01T00:00:00Z",
            "version": 1,
            "data": document,
        }
    return document


any_document = st.one_of(documents(), json_values)


# =============================================================================
# PROPERTIES
# =============================================================================


@settings(deadline=None)
@given(any_document)
def test_migrate_is_idempotent_for_generated_documents(raw) -> None:
    """Migrating an already canonical payload must change nothing."""
    snapshot = migrate(raw)

    assert migrate(snapshot_to_payload(snapshot)) == snapshot
    assert migrate(snapshot) == snapshot


@settings(deadline=None)
@given(any_document)
def test_stored_text_reloads_to_identical_text(raw) -> None:
    """Serialized snapshots should parse back without needing a heal."""
    stored_text = serialize_snapshot(migrate(raw))

    assert serialize_snapshot(migrate(json.loads(stored_text))) == stored_text


@settings(deadline=None)
@given(any_document)
def test_migrated_references_resolve_to_holds(raw) -> None:
    """Every angle and cover image must point at a hold in the snapshot."""
    snapshot = migrate(raw)
    holds = set(snapshot.holds)

    assert all(angle.hold in holds for angle in snapshot.angles)
    assert set(snapshot.hold_images) <= holds


@settings(deadline=None)
@given(any_document)
def test_migrated_ids_and_hold_names_are_unique(raw) -> None:
    """Angle ids are unique and holds are unique ignoring case."""
    snapshot = migrate(raw)
    angle_ids = [angle.angle_id for angle in snapshot.angles]
    hold_keys = [hold_key(hold) for hold in snapshot.holds]

    assert len(angle_ids) == len(set(angle_ids))
    assert len(hold_keys) == len(set(hold_keys))
    assert all(angle_id.strip() for angle_id in angle_ids)


@settings(deadline=None)
@given(any_document)
def test_migrated_fields_are_canonical(raw) -> None:
    """Values are finite and clamped, saws known, names trimmed."""
    snapshot = migrate(raw)

    assert isinstance(snapshot, CanonicalSnapshot)
    assert snapshot.version == CURRENT_SCHEMA_VERSION
    for angle in snapshot.angles:
        assert math.isfinite(angle.value)
        assert ANGLE_MIN_VALUE <= angle.value <= ANGLE_MAX_VALUE
        assert angle.saw in ("main", "stefan")
        assert angle.drawing is None or angle.drawing.startswith("data:image/")
    assert all(hold and hold == " ".join(hold.split()) for hold in snapshot.holds)
