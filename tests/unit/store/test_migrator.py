"""Unit tests for the snapshot migrator."""

from __future__ import annotations

import pytest

from core.types import CanonicalSnapshot
from sanitize.sanitizer import sanitize_holds
from sanitize.seed_data import DEFAULT_HOLDS
from store.migrator import MIGRATIONS, migrate, unwrap_document
from store.snapshot_payload import snapshot_to_payload


@pytest.mark.parametrize("raw", [None, 42, "text", [], {}])
def test_migrate_falls_back_to_seed_catalog(raw) -> None:
    """Unusable documents should yield the seed catalog."""
    snapshot = migrate(raw)

    assert list(snapshot.holds) == sanitize_holds(list(DEFAULT_HOLDS))
    assert {angle.angle_id for angle in snapshot.angles} == {
        f"seed-angle-{index}" for index in range(1, 6)
    }


def test_migrate_keeps_explicit_empty_lists() -> None:
    """Present but empty lists should not be replaced by seed data."""
    snapshot = migrate({"holds": [], "angles": []})

    assert snapshot == CanonicalSnapshot()


def test_migrate_unwraps_export_envelope() -> None:
    """An export envelope should be read through its data field."""
    envelope = {
        "app": "AnglesProto",
        "version": 1,
        "data": {"holds": ["Solo"], "angles": [{"id": "x", "hold": "Solo", "value": 7}]},
    }

    snapshot = migrate(envelope)

    assert snapshot.holds == ("Solo",) and snapshot.angles[0].value == 7.0


def test_migrate_is_idempotent() -> None:
    """Migrating a migrated payload should change nothing."""
    raw = {
        "holds": ["b", "B", "a"],
        "angles": [{"id": "1", "hold": "b", "value": "200"}, {"hold": "zzz"}],
        "holdImages": {"a": "data:image/png;base64,AA", "c": "data:image/png;base64,BB"},
    }
    once = migrate(raw)

    assert migrate(snapshot_to_payload(once)) == once and migrate(once) == once


def test_migrate_enforces_referential_integrity() -> None:
    """Every angle and cover image should reference an existing hold."""
    snapshot = migrate(
        {
            "holds": ["Amon"],
            "angles": [{"hold": "Amon"}, {"hold": "Gone"}],
            "holdImages": {"Gone": "data:image/png;base64,AA"},
        }
    )

    assert [angle.hold for angle in snapshot.angles] == ["Amon"]
    assert dict(snapshot.hold_images) == {}


def test_migrate_restamps_version() -> None:
    """Declared schema versions should be replaced by the current one."""
    assert migrate({"version": 99, "holds": [], "angles": []}).version == 1


def test_migrate_runs_registered_schema_steps(monkeypatch: pytest.MonkeyPatch) -> None:
    """Older documents should pass through registered upgrade steps."""
    monkeypatch.setitem(MIGRATIONS, 0, lambda document: {**document, "holds": ["Upgraded"]})

    old_snapshot = migrate({"version": 0, "holds": ["Legacy"], "angles": []})
    current_snapshot = migrate({"version": 1, "holds": ["Legacy"], "angles": []})

    assert old_snapshot.holds == ("Upgraded",) and current_snapshot.holds == ("Legacy",)


def test_unwrap_document_returns_empty_for_non_object() -> None:
    """Non-object input should unwrap to an empty mapping."""
    assert dict(unwrap_document(["holds"])) == {}
