"""Unit tests for scalar normalizers."""

from __future__ import annotations

import pytest

from sanitize.normalizer import (
    normalize_angle_value,
    normalize_id,
    normalize_image_ref,
    normalize_name,
    normalize_saw,
    sort_holds,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  Avalon   Flat ", "Avalon Flat"),
        (None, ""),
        (0, ""),
        (12, "12"),
        (1.5, "1.5"),
        (["Austin"], ""),
    ],
)
def test_normalize_name_coerces_and_collapses_whitespace(raw, expected) -> None:
    """Names should be trimmed, collapsed, and never raise."""
    assert normalize_name(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (-5, 0.0),
        (120, 90.0),
        ("28,5", 28.5),
        ("abc", 0.0),
        (None, 0.0),
        ("", 0.0),
        (True, 0.0),
        ("1_0", 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        (45, 45.0),
    ],
)
def test_normalize_angle_value_clamps_and_parses(raw, expected) -> None:
    """Angle values should land in [0, 90] with 0 for garbage."""
    assert normalize_angle_value(raw) == expected


def test_normalize_saw_collapses_unknown_to_primary() -> None:
    """Only the secondary marker survives; everything else is primary."""
    assert [normalize_saw(raw) for raw in ("stefan", "main", "other", None)] == [
        "stefan",
        "main",
        "main",
        "main",
    ]


def test_normalize_image_ref_requires_inline_prefix() -> None:
    """Only data:image/ references are accepted."""
    assert normalize_image_ref("data:image/png;base64,AAA") == "data:image/png;base64,AAA"
    assert normalize_image_ref("https://example.com/a.png") is None


def test_normalize_id_keeps_string_and_generates_for_blank() -> None:
    """Blank ids should be replaced with fresh unique ids."""
    generated = {normalize_id(""), normalize_id(None)}

    assert normalize_id("abc") == "abc" and len(generated) == 2


def test_sort_holds_ignores_case_and_accents() -> None:
    """Sorting should be case- and accent-insensitive with a stable tiebreak."""
    assert sort_holds(["beta", "Álpha", "alpha", "Gamma"]) == ["alpha", "Álpha", "beta", "Gamma"]
