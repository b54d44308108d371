"""Shared edit-script execution engine for CLI and SDK workflows.

This module maps validated edit-script steps to client operations. The
caller opens the client once, so the steps of a script coalesce in the
same pending snapshot instead of being written one by one. A failed
script is rolled back to the catalog it started from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from core.edit_script import EditScript, EditStep, load_edit_script
from core.edit_script_fields import (
    optional_angle_value,
    optional_bool,
    optional_saw,
    optional_string,
    required_string,
)
from core.errors import AnglesEditScriptError, AnglesError
from core.logging_config import get_logger
from core.types import Angle, CanonicalSnapshot

_LOGGER = get_logger(__name__)


class EditScriptClient(Protocol):
    """Client API contract required by edit-script execution."""

    @property
    def snapshot(self) -> CanonicalSnapshot: ...

    def replace_snapshot(self, snapshot: CanonicalSnapshot) -> CanonicalSnapshot: ...

    def add_hold(self, name: str) -> str: ...

    def rename_hold(self, old_name: str, new_name: str) -> str: ...

    def remove_hold(self, name: str) -> int: ...

    def add_angle(self, hold: str, saw: str | None = None, value: float | str = 0) -> Angle: ...

    def update_angle(self, angle_id: str, **changes: object) -> Angle: ...

    def remove_angle(self, angle_id: str) -> None: ...

    def set_drawing_from_file(self, angle_id: str, image_path: str) -> Angle: ...

    def set_cover_from_file(self, hold: str, image_path: str) -> None: ...

    def remove_cover_image(self, hold: str) -> None: ...

    def import_from_file(self, input_path: str) -> CanonicalSnapshot: ...

    def export_to_file(self, output_path: str) -> Path: ...


@dataclass
class EditScriptExecutionContext:
    """In-memory context used to execute edit-script steps.

    Attributes:
        client: Open client receiving the edits.
        base_dir: Folder relative file paths resolve against.
        angle_refs: Angle ids registered by ``add-angle`` steps under ``ref``.
    """

    client: EditScriptClient
    base_dir: Path
    angle_refs: dict[str, str] = field(default_factory=dict)


def execute_edit_script_file(client: EditScriptClient, script_file: str) -> tuple[str, ...]:
    """Load and execute an edit-script file, returning printable output lines."""
    script = load_edit_script(script_file)
    return execute_edit_script(client, script)


def execute_edit_script(client: EditScriptClient, script: EditScript) -> tuple[str, ...]:
    """Execute a parsed edit script and return output lines.

    A failing step restores the catalog as it was before the script, so
    a rejected script leaves nothing behind to be written. Files already
    exported and backups already taken by earlier steps remain.

    Args:
        client: Open client receiving the edits.
        script: Validated edit script.

    Returns:
        One or more output lines per step.

    Raises:
        AnglesEditScriptError: If a step is malformed or its edit is rejected.
    """
    context = EditScriptExecutionContext(client=client, base_dir=script.base_dir)
    starting_snapshot = client.snapshot
    output_lines: list[str] = []
    for index, step in enumerate(script.steps):
        try:
            output_lines.extend(_execute_step(context, step))
        except AnglesError as error:
            client.replace_snapshot(starting_snapshot)
            _LOGGER.warning(
                "edit_script_rolled_back", failed_step=index + 1, command=step.command
            )
            if isinstance(error, AnglesEditScriptError):
                raise
            raise AnglesEditScriptError(
                f"Edit-script step #{index + 1} ({step.command}) failed: {error}"
            ) from error
    _LOGGER.info("edit_script_applied", step_count=len(script.steps))
    return tuple(output_lines)


def _execute_step(context: EditScriptExecutionContext, step: EditStep) -> tuple[str, ...]:
    if step.command == "add-hold":
        return (f"hold={context.client.add_hold(required_string(step.args, 'name'))}",)
    if step.command == "rename-hold":
        renamed = context.client.rename_hold(
            required_string(step.args, "hold"), required_string(step.args, "to")
        )
        return (f"hold={renamed}",)
    if step.command == "remove-hold":
        removed_count = context.client.remove_hold(required_string(step.args, "hold"))
        return (f"removed_angles={removed_count}",)
    if step.command == "add-angle":
        return (_execute_add_angle_step(context, step),)
    if step.command == "update-angle":
        return (_execute_update_angle_step(context, step),)
    if step.command == "remove-angle":
        angle_id = _resolve_angle_id(context, step)
        context.client.remove_angle(angle_id)
        return (f"removed_angle={angle_id}",)
    if step.command == "set-cover":
        hold = required_string(step.args, "hold")
        context.client.set_cover_from_file(hold, _resolve_path(context, step, "image"))
        return (f"cover={hold}",)
    if step.command == "remove-cover":
        hold = required_string(step.args, "hold")
        context.client.remove_cover_image(hold)
        return (f"cover_removed={hold}",)
    if step.command == "import":
        snapshot = context.client.import_from_file(_resolve_path(context, step, "path"))
        return (f"holds={len(snapshot.holds)}", f"angles={len(snapshot.angles)}")
    if step.command == "export":
        return (f"export={context.client.export_to_file(_resolve_path(context, step, 'path'))}",)
    raise AnglesEditScriptError(f"Unsupported edit-script command '{step.command}'.")


def _execute_add_angle_step(context: EditScriptExecutionContext, step: EditStep) -> str:
    value = optional_angle_value(step.args, "value")
    angle = context.client.add_angle(
        required_string(step.args, "hold"),
        saw=optional_saw(step.args, "saw"),
        value=0 if value is None else value,
    )
    ref = optional_string(step.args, "ref")
    if ref is not None:
        if ref in context.angle_refs:
            raise AnglesEditScriptError(f"Edit-script ref '{ref}' is already defined.")
        context.angle_refs[ref] = angle.angle_id
    return f"angle={angle.angle_id}"


def _execute_update_angle_step(context: EditScriptExecutionContext, step: EditStep) -> str:
    angle_id = _resolve_angle_id(context, step)
    changes: dict[str, object] = {}
    value = optional_angle_value(step.args, "value")
    if value is not None:
        changes["value"] = value
    saw = optional_saw(step.args, "saw")
    if saw is not None:
        changes["saw"] = saw
    drawing_path = optional_string(step.args, "drawing")
    if optional_bool(step.args, "clear_drawing", default_value=False):
        if drawing_path is not None:
            raise AnglesEditScriptError(
                "Edit-script step cannot set 'drawing' and 'clear_drawing' together."
            )
        changes["drawing"] = None
    angle = context.client.update_angle(angle_id, **changes)
    if drawing_path is not None:
        angle = context.client.set_drawing_from_file(
            angle_id, _resolve_path(context, step, "drawing")
        )
    return f"angle={angle.angle_id}"


def _resolve_angle_id(context: EditScriptExecutionContext, step: EditStep) -> str:
    angle_id = optional_string(step.args, "id")
    ref = optional_string(step.args, "ref")
    if (angle_id is None) == (ref is None):
        raise AnglesEditScriptError("Edit-script angle step needs exactly one of 'id' or 'ref'.")
    if angle_id is not None:
        return angle_id
    if ref not in context.angle_refs:
        raise AnglesEditScriptError(
            f"Edit-script ref '{ref}' is not defined by an earlier add-angle step."
        )
    return context.angle_refs[ref]


def _resolve_path(context: EditScriptExecutionContext, step: EditStep, field_name: str) -> str:
    raw_path = Path(required_string(step.args, field_name)).expanduser()
    if raw_path.is_absolute():
        return str(raw_path)
    return str(context.base_dir / raw_path)
