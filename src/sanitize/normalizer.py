"""Scalar normalizers for untrusted catalog fields.

Every function here is total over JsonValue: odd input degrades to a
canonical default and nothing is ever raised to the caller.
"""

from __future__ import annotations

import math
import unicodedata
import uuid
from typing import Iterable

from core.constants import (
    ANGLE_MAX_VALUE,
    ANGLE_MIN_VALUE,
    DEFAULT_ANGLE_VALUE,
    INLINE_IMAGE_PREFIX,
    SAW_PRIMARY,
    SAW_SECONDARY,
)
from core.types import JsonValue, SawCategory


def normalize_name(raw: JsonValue) -> str:
    """Coerce a raw value into a whitespace-normalized display name.

    Falsy values (None, False, zero, empty string) become an empty name,
    as do containers. The empty string is a valid result; callers decide
    whether an empty name is acceptable.

    Args:
        raw: Untrusted JSON value.

    Returns:
        Trimmed name with internal whitespace runs collapsed to one space.
    """
    text = _coerce_text(raw)
    return " ".join(text.split())


def normalize_angle_value(raw: JsonValue) -> float:
    """Coerce a raw value into an angle in degrees.

    Numbers pass through; strings may use ``.`` or ``,`` as decimal
    separator. Anything unparsable or non-finite yields 0.

    Args:
        raw: Untrusted JSON value.

    Returns:
        Angle clamped to the closed interval [0, 90].
    """
    number = _coerce_number(raw)
    if number is None or not math.isfinite(number):
        return DEFAULT_ANGLE_VALUE
    return clamp(number, ANGLE_MIN_VALUE, ANGLE_MAX_VALUE)


def normalize_image_ref(raw: JsonValue) -> str | None:
    """Return the value when it is an inline image reference, else None."""
    if isinstance(raw, str) and raw.startswith(INLINE_IMAGE_PREFIX):
        return raw
    return None


def normalize_id(raw: JsonValue) -> str:
    """Keep a non-blank string id, otherwise generate a fresh one."""
    if isinstance(raw, str) and raw.strip():
        return raw
    return generate_id()


def normalize_saw(raw: JsonValue) -> SawCategory:
    """Collapse any category other than the secondary one to primary."""
    if raw == SAW_SECONDARY:
        return SAW_SECONDARY
    return SAW_PRIMARY


def generate_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def hold_key(name: str) -> str:
    """Return the case-insensitive identity key for a hold name."""
    return name.casefold()


def sort_holds(names: Iterable[str]) -> list[str]:
    """Sort hold names ignoring case and accents.

    Names that collate equal are ordered by their raw text so the result
    never depends on input order.

    Args:
        names: Hold names to sort.

    Returns:
        New sorted list.
    """
    return sorted(names, key=lambda name: (_collation_key(name), name))


def _collation_key(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold()


def _coerce_text(raw: JsonValue) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else ""
    if isinstance(raw, int):
        return str(raw) if raw else ""
    if isinstance(raw, float):
        if raw == 0 or math.isnan(raw):
            return ""
        return _format_number(raw)
    return ""


def _format_number(number: float) -> str:
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _coerce_number(raw: JsonValue) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, float):
        return raw
    if isinstance(raw, int):
        try:
            return float(raw)
        except OverflowError:
            return None
    if raw is None:
        return DEFAULT_ANGLE_VALUE
    if not isinstance(raw, str):
        return None
    text = raw.strip().replace(",", ".", 1)
    if not text:
        return DEFAULT_ANGLE_VALUE
    if "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None
