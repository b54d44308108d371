"""Collection sanitizers for holds, angles, and cover images.

Scalar fields are repaired in place; an angle whose hold reference does
not resolve is dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import AbstractSet, Iterable

from core.types import Angle, JsonValue
from sanitize.normalizer import (
    generate_id,
    hold_key,
    normalize_angle_value,
    normalize_id,
    normalize_image_ref,
    normalize_name,
    normalize_saw,
    sort_holds,
)


def sanitize_holds(raw_list: JsonValue) -> list[str]:
    """Normalize, deduplicate, and sort a raw hold list.

    Deduplication is case-insensitive and keeps the first spelling seen,
    so which case variant survives depends on input order.

    Args:
        raw_list: Untrusted JSON value, expected to be a list of names.

    Returns:
        Sorted unique hold names; empty when input is not a list.
    """
    if not isinstance(raw_list, list):
        return []
    unique_names: list[str] = []
    seen_keys: set[str] = set()
    for raw_name in raw_list:
        name = normalize_name(raw_name)
        if not name:
            continue
        key = hold_key(name)
        if key in seen_keys:
            continue
        seen_keys.add(key)
        unique_names.append(name)
    return sort_holds(unique_names)


def sanitize_angle(raw_angle: JsonValue, valid_hold_names: AbstractSet[str]) -> Angle | None:
    """Build a canonical angle from one raw record.

    Args:
        raw_angle: Untrusted JSON value, expected to be an object.
        valid_hold_names: Current canonical hold names.

    Returns:
        Sanitized angle, or None when its hold does not resolve.
    """
    if not isinstance(raw_angle, Mapping):
        return None
    hold = normalize_name(raw_angle.get("hold"))
    if not hold or hold not in valid_hold_names:
        return None
    return Angle(
        angle_id=normalize_id(raw_angle.get("id")),
        hold=hold,
        value=normalize_angle_value(raw_angle.get("value")),
        saw=normalize_saw(raw_angle.get("saw")),
        drawing=normalize_image_ref(raw_angle.get("drawing")),
    )


def sanitize_angle_list(raw_list: JsonValue, valid_hold_names: AbstractSet[str]) -> list[Angle]:
    """Sanitize a raw angle list and make ids unique.

    Args:
        raw_list: Untrusted JSON value, expected to be a list of objects.
        valid_hold_names: Current canonical hold names.

    Returns:
        Ordered angles; a later duplicate id is replaced with a fresh one.
    """
    if not isinstance(raw_list, list):
        return []
    angles: list[Angle] = []
    seen_ids: set[str] = set()
    for raw_angle in raw_list:
        angle = sanitize_angle(raw_angle, valid_hold_names)
        if angle is None:
            continue
        if angle.angle_id in seen_ids:
            angle = replace(angle, angle_id=_fresh_id(seen_ids))
        seen_ids.add(angle.angle_id)
        angles.append(angle)
    return angles


def sanitize_cover_images(raw_map: JsonValue, valid_hold_names: Iterable[str]) -> dict[str, str]:
    """Keep cover images for current holds only.

    Args:
        raw_map: Untrusted JSON value, expected to map names to images.
        valid_hold_names: Current canonical hold names, in display order.

    Returns:
        Cover image map ordered like valid_hold_names.
    """
    if not isinstance(raw_map, Mapping):
        return {}
    images_by_name: dict[str, str] = {}
    for raw_key, raw_value in raw_map.items():
        name = normalize_name(raw_key)
        image_ref = normalize_image_ref(raw_value)
        if not name or image_ref is None or name in images_by_name:
            continue
        images_by_name[name] = image_ref
    return {name: images_by_name[name] for name in valid_hold_names if name in images_by_name}


def _fresh_id(taken_ids: AbstractSet[str]) -> str:
    candidate = generate_id()
    while candidate in taken_ids:
        candidate = generate_id()
    return candidate
