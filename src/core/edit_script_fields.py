"""Type-safe field parsing helpers for edit-script execution.

This module centralizes primitive parsing so step executors stay concise
and report consistent validation errors.
"""

from __future__ import annotations

from typing import Mapping

from core.constants import SUPPORTED_SAWS
from core.errors import AnglesEditScriptError


def required_string(args: Mapping[str, object], field_name: str) -> str:
    """Read a required string field from an edit-script step."""
    value = optional_string(args, field_name)
    if value is None:
        raise AnglesEditScriptError(f"Edit-script step is missing required field '{field_name}'.")
    return value


def optional_string(args: Mapping[str, object], field_name: str) -> str | None:
    """Read an optional string field from an edit-script step."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise AnglesEditScriptError(f"Edit-script field '{field_name}' must be a string when provided.")


def optional_bool(args: Mapping[str, object], field_name: str, default_value: bool) -> bool:
    """Read an optional boolean field from an edit-script step."""
    value = args.get(field_name)
    if value is None:
        return default_value
    if isinstance(value, bool):
        return value
    raise AnglesEditScriptError(f"Edit-script field '{field_name}' must be true or false.")


def optional_angle_value(args: Mapping[str, object], field_name: str) -> float | str | None:
    """Read an optional angle value; numeric strings are left to the normalizer."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, bool):
        raise AnglesEditScriptError(f"Edit-script field '{field_name}' must be a number.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return value
    raise AnglesEditScriptError(f"Edit-script field '{field_name}' must be a number.")


def optional_saw(args: Mapping[str, object], field_name: str) -> str | None:
    """Read an optional saw category and reject unknown names."""
    value = optional_string(args, field_name)
    if value is None:
        return None
    if value not in SUPPORTED_SAWS:
        supported_rows = ", ".join(SUPPORTED_SAWS)
        raise AnglesEditScriptError(
            f"Unsupported saw '{value}'. Use one of: {supported_rows}."
        )
    return value
