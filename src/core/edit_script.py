"""Typed edit-script parsing for batched catalog changes.

This module loads and validates YAML edit scripts used by the CLI.
A script runs in one store session, so its edits coalesce in one pending
snapshot. A failed script is rolled back to the catalog it started from.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Sequence, cast

import yaml

from core.errors import AnglesEditScriptError

EditCommand = Literal[
    "add-hold",
    "rename-hold",
    "remove-hold",
    "add-angle",
    "update-angle",
    "remove-angle",
    "set-cover",
    "remove-cover",
    "import",
    "export",
]
SUPPORTED_EDIT_COMMANDS: tuple[EditCommand, ...] = (
    "add-hold",
    "rename-hold",
    "remove-hold",
    "add-angle",
    "update-angle",
    "remove-angle",
    "set-cover",
    "remove-cover",
    "import",
    "export",
)
SUPPORTED_EDIT_SCRIPT_VERSION = 1


@dataclass(frozen=True)
class EditStep:
    """One catalog edit from an edit script."""

    command: EditCommand
    args: Mapping[str, object]


@dataclass(frozen=True)
class EditScript:
    """Validated edit-script root object."""

    version: int
    base_dir: Path
    steps: tuple[EditStep, ...]


def load_edit_script(script_path: str) -> EditScript:
    """Load and validate a YAML edit script from disk.

    Args:
        script_path: File path to YAML edit script.

    Returns:
        Fully validated edit script; relative paths resolve from its folder.

    Raises:
        AnglesEditScriptError: If file is invalid or schema checks fail.
    """
    script_file = Path(script_path).expanduser().resolve()
    payload = _load_yaml_payload(script_file)
    root_mapping = _expect_mapping(payload, "edit script root")
    _validate_root_keys(root_mapping)
    version = _parse_version(root_mapping)
    steps = _parse_steps(root_mapping)
    return EditScript(version=version, base_dir=script_file.parent, steps=steps)


def _load_yaml_payload(script_file: Path) -> object:
    if not script_file.exists():
        raise AnglesEditScriptError(
            f"Edit script does not exist at {script_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(script_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise AnglesEditScriptError(
            f"Failed to read edit script at {script_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise AnglesEditScriptError(
            f"Failed to parse YAML edit script at {script_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise AnglesEditScriptError(
            f"Edit script at {script_file} is empty. Define 'version' and 'steps'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise AnglesEditScriptError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise AnglesEditScriptError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise AnglesEditScriptError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise AnglesEditScriptError(
            "Edit script field 'version' must be an integer. Set version: 1."
        )
    if raw_version != SUPPORTED_EDIT_SCRIPT_VERSION:
        raise AnglesEditScriptError(
            f"Unsupported edit script version {raw_version}. Use version: 1."
        )
    return raw_version


def _parse_steps(root_mapping: Mapping[str, object]) -> tuple[EditStep, ...]:
    raw_steps = root_mapping.get("steps")
    if raw_steps is None:
        raise AnglesEditScriptError(
            "Edit script missing required field 'steps'. Add a non-empty list of commands."
        )
    step_rows = _expect_sequence(raw_steps, "edit script steps")
    if len(step_rows) == 0:
        raise AnglesEditScriptError("Edit script field 'steps' must include at least one step.")
    return tuple(_parse_step(step_value, index) for index, step_value in enumerate(step_rows))


def _parse_step(step_value: object, step_index: int) -> EditStep:
    context = f"edit script step #{step_index + 1}"
    step_mapping = _expect_mapping(step_value, context)
    raw_command = step_mapping.get("command")
    if not isinstance(raw_command, str):
        raise AnglesEditScriptError(f"Invalid {context}: field 'command' must be a string.")
    command = _parse_command(raw_command, context)
    return EditStep(command=command, args=_parse_step_args(step_mapping, context))


def _parse_command(raw_command: str, context: str) -> EditCommand:
    if raw_command in SUPPORTED_EDIT_COMMANDS:
        return cast(EditCommand, raw_command)
    supported_rows = ", ".join(SUPPORTED_EDIT_COMMANDS)
    raise AnglesEditScriptError(
        f"Unsupported command '{raw_command}' in {context}. Use one of: {supported_rows}."
    )


def _parse_step_args(step_mapping: Mapping[str, object], context: str) -> Mapping[str, object]:
    if "args" in step_mapping:
        if len(step_mapping.keys() - {"command", "args"}) > 0:
            raise AnglesEditScriptError(
                f"Invalid {context}: when using 'args', do not mix inline keys."
            )
        return _expect_mapping(step_mapping["args"], f"{context} args")
    return {key: value for key, value in step_mapping.items() if key != "command"}


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    allowed_keys = {"version", "steps"}
    unknown_keys = sorted(set(root_mapping) - allowed_keys)
    if unknown_keys:
        raise AnglesEditScriptError(
            f"Edit script contains unknown root fields: {', '.join(unknown_keys)}."
        )
