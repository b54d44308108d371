"""Pure catalog edit operations.

Each function takes a canonical snapshot and returns a new one; the
caller hands the result to the persistence store. Renames and deletes
cascade to angles and cover images.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Final

from core.errors import AnglesCatalogError
from core.types import Angle, CanonicalSnapshot, JsonValue
from sanitize.normalizer import (
    generate_id,
    hold_key,
    normalize_angle_value,
    normalize_image_ref,
    normalize_name,
    normalize_saw,
    sort_holds,
)


class Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = Unset()


def resolve_hold(snapshot: CanonicalSnapshot, name: str) -> str:
    """Find the canonical spelling of a hold name.

    Args:
        snapshot: Current snapshot.
        name: Hold name in any case or spacing.

    Returns:
        Canonical hold name.

    Raises:
        AnglesCatalogError: If no hold matches.
    """
    wanted = hold_key(normalize_name(name))
    for hold in snapshot.holds:
        if hold_key(hold) == wanted:
            return hold
    raise AnglesCatalogError(f"Hold '{name}' does not exist. Use 'holds' to list hold names.")


def find_angle(snapshot: CanonicalSnapshot, angle_id: str) -> Angle:
    """Return the angle with the given id.

    Raises:
        AnglesCatalogError: If no angle has that id.
    """
    for angle in snapshot.angles:
        if angle.angle_id == angle_id:
            return angle
    raise AnglesCatalogError(f"Angle '{angle_id}' does not exist.")


def add_hold(snapshot: CanonicalSnapshot, name: str) -> tuple[CanonicalSnapshot, str]:
    """Add a hold.

    Args:
        snapshot: Current snapshot.
        name: New hold name; whitespace is normalized.

    Returns:
        Updated snapshot and the stored hold name.

    Raises:
        AnglesCatalogError: If the name is empty or already used in any case.
    """
    hold_name = _require_name(name)
    _ensure_name_free(snapshot, hold_name, ignore=None)
    holds = tuple(sort_holds([*snapshot.holds, hold_name]))
    return replace(snapshot, holds=holds), hold_name


def rename_hold(
    snapshot: CanonicalSnapshot, old_name: str, new_name: str
) -> tuple[CanonicalSnapshot, str]:
    """Rename a hold in place, carrying its angles and cover image along.

    A rename that only changes letter case is allowed.

    Returns:
        Updated snapshot and the stored new name.

    Raises:
        AnglesCatalogError: If the hold is missing or the new name is taken.
    """
    current = resolve_hold(snapshot, old_name)
    renamed = _require_name(new_name)
    _ensure_name_free(snapshot, renamed, ignore=current)
    holds = tuple(sort_holds([renamed if hold == current else hold for hold in snapshot.holds]))
    angles = tuple(
        replace(angle, hold=renamed) if angle.hold == current else angle
        for angle in snapshot.angles
    )
    hold_images = {
        (renamed if hold == current else hold): image
        for hold, image in snapshot.hold_images.items()
    }
    return replace(snapshot, holds=holds, angles=angles, hold_images=hold_images), renamed


def remove_hold(snapshot: CanonicalSnapshot, name: str) -> tuple[CanonicalSnapshot, int]:
    """Delete a hold with its angles and cover image.

    Returns:
        Updated snapshot and the number of angles removed with it.

    Raises:
        AnglesCatalogError: If the hold is missing.
    """
    current = resolve_hold(snapshot, name)
    kept_angles = tuple(angle for angle in snapshot.angles if angle.hold != current)
    updated = replace(
        snapshot,
        holds=tuple(hold for hold in snapshot.holds if hold != current),
        angles=kept_angles,
        hold_images={
            hold: image for hold, image in snapshot.hold_images.items() if hold != current
        },
    )
    return updated, len(snapshot.angles) - len(kept_angles)


def add_angle(
    snapshot: CanonicalSnapshot,
    hold: str,
    saw: JsonValue = None,
    value: JsonValue = 0,
) -> tuple[CanonicalSnapshot, Angle]:
    """Append a new angle to a hold.

    Raises:
        AnglesCatalogError: If the hold is missing.
    """
    angle = Angle(
        angle_id=_unused_id(snapshot),
        hold=resolve_hold(snapshot, hold),
        value=normalize_angle_value(value),
        saw=normalize_saw(saw),
    )
    return replace(snapshot, angles=(*snapshot.angles, angle)), angle


def update_angle(
    snapshot: CanonicalSnapshot,
    angle_id: str,
    *,
    value: JsonValue | Unset = UNSET,
    saw: JsonValue | Unset = UNSET,
    drawing: JsonValue | Unset = UNSET,
) -> tuple[CanonicalSnapshot, Angle]:
    """Patch fields of one angle.

    Passing ``drawing=None`` clears the drawing. A drawing that is not an
    inline image reference leaves the current drawing untouched.

    Returns:
        Updated snapshot and the patched angle.

    Raises:
        AnglesCatalogError: If the angle is missing.
    """
    angle = find_angle(snapshot, angle_id)
    patched = angle
    if not isinstance(value, Unset):
        patched = replace(patched, value=normalize_angle_value(value))
    if not isinstance(saw, Unset):
        patched = replace(patched, saw=normalize_saw(saw))
    if drawing is None:
        patched = replace(patched, drawing=None)
    elif not isinstance(drawing, Unset):
        image_ref = normalize_image_ref(drawing)
        if image_ref is not None:
            patched = replace(patched, drawing=image_ref)
    angles = tuple(patched if item.angle_id == angle_id else item for item in snapshot.angles)
    return replace(snapshot, angles=angles), patched


def remove_angle(snapshot: CanonicalSnapshot, angle_id: str) -> CanonicalSnapshot:
    """Delete one angle.

    Raises:
        AnglesCatalogError: If the angle is missing.
    """
    find_angle(snapshot, angle_id)
    return replace(
        snapshot,
        angles=tuple(angle for angle in snapshot.angles if angle.angle_id != angle_id),
    )


def set_cover_image(snapshot: CanonicalSnapshot, hold: str, image_ref: JsonValue) -> CanonicalSnapshot:
    """Attach a cover image; a non-image value is a silent no-op.

    Raises:
        AnglesCatalogError: If the hold is missing.
    """
    current = resolve_hold(snapshot, hold)
    normalized = normalize_image_ref(image_ref)
    if normalized is None:
        return snapshot
    return replace(snapshot, hold_images={**snapshot.hold_images, current: normalized})


def remove_cover_image(snapshot: CanonicalSnapshot, hold: str) -> CanonicalSnapshot:
    """Detach a hold's cover image if it has one.

    Raises:
        AnglesCatalogError: If the hold is missing.
    """
    current = resolve_hold(snapshot, hold)
    return replace(
        snapshot,
        hold_images={name: image for name, image in snapshot.hold_images.items() if name != current},
    )


def angles_for_hold(
    snapshot: CanonicalSnapshot, hold: str, saw: str | None = None
) -> list[Angle]:
    """List a hold's angles, optionally restricted to one saw category."""
    current = resolve_hold(snapshot, hold)
    return [
        angle
        for angle in snapshot.angles
        if angle.hold == current and (saw is None or angle.saw == saw)
    ]


def angle_label(value: float) -> str:
    """Format an angle for display, e.g. ``65°`` or ``28.2°``."""
    if abs(value - round(value)) < 1e-9:
        return f"{round(value)}°"
    return f"{value:.1f}°"


def format_last_modified(timestamp_ms: int | None) -> str:
    """Format a last-modified marker in local time, or ``—`` when unknown."""
    if timestamp_ms is None or timestamp_ms <= 0:
        return "—"
    try:
        moment = datetime.fromtimestamp(timestamp_ms / 1000)
    except (OverflowError, OSError, ValueError):
        return "—"
    return moment.strftime("%Y-%m-%d %H:%M")


def _require_name(name: str) -> str:
    normalized = normalize_name(name)
    if not normalized:
        raise AnglesCatalogError("Hold name must not be empty.")
    return normalized


def _ensure_name_free(snapshot: CanonicalSnapshot, name: str, ignore: str | None) -> None:
    wanted = hold_key(name)
    for hold in snapshot.holds:
        if hold == ignore:
            continue
        if hold_key(hold) == wanted:
            raise AnglesCatalogError(f"Hold '{hold}' already exists.")


def _unused_id(snapshot: CanonicalSnapshot) -> str:
    taken = {angle.angle_id for angle in snapshot.angles}
    candidate = generate_id()
    while candidate in taken:
        candidate = generate_id()
    return candidate
