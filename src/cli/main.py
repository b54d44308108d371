"""Angles CLI entry points.
This module exposes catalog, import/export, and backup commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Sequence

from core.config import AnglesConfig
from core.constants import DEFAULT_EXPORT_FILE_NAME, SUPPORTED_SAWS
from core.edit_script_execution import execute_edit_script_file
from core.errors import AnglesError
from store.catalog_edits import angle_label, format_last_modified
from store.catalog_sdk import AnglesClient

CommandHandler = Callable[[AnglesClient, argparse.Namespace], int]


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="angles", description="Angles catalog CLI")
    parser.add_argument("--data-root", help="Override ANGLES_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_read_commands(subparsers)
    _add_hold_commands(subparsers)
    _add_angle_commands(subparsers)
    _add_cover_commands(subparsers)
    _add_transfer_commands(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Angles CLI.

    Each command opens the store, applies its change, and closes it, which
    forces any pending write to storage.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = _COMMAND_HANDLERS.get(args.command)
    if handler is None:
        parser.error(f"Unsupported command: {args.command}")
        return 2
    try:
        with _build_client(args.data_root) as client:
            return handler(client, args)
    except AnglesError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


def _build_client(data_root: str | None) -> AnglesClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = AnglesConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return AnglesClient(config)


def _run_show_command(client: AnglesClient, args: argparse.Namespace) -> int:
    snapshot = client.snapshot
    print(f"holds={len(snapshot.holds)}")
    print(f"angles={len(snapshot.angles)}")
    print(f"cover_images={len(snapshot.hold_images)}")
    print(f"backups={len(client.list_backups())}")
    print(f"last_modified={client.format_last_modified()}")
    return 0


def _run_holds_command(client: AnglesClient, args: argparse.Namespace) -> int:
    for hold in client.holds():
        angle_count = sum(1 for angle in client.snapshot.angles if angle.hold == hold)
        cover_marker = "cover" if hold in client.snapshot.hold_images else "-"
        print(f"{hold}\t{angle_count}\t{cover_marker}")
    return 0


def _run_angles_command(client: AnglesClient, args: argparse.Namespace) -> int:
    """Handle angles command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for angle in client.angles(hold=args.hold, saw=args.saw):
        drawing_marker = "drawing" if angle.drawing else "-"
        print(
            f"{angle.angle_id}\t{angle.hold}\t{angle.saw}\t"
            f"{angle_label(angle.value)}\t{drawing_marker}"
        )
    return 0


def _run_add_hold_command(client: AnglesClient, args: argparse.Namespace) -> int:
    print(client.add_hold(args.name))
    return 0


def _run_rename_hold_command(client: AnglesClient, args: argparse.Namespace) -> int:
    print(client.rename_hold(args.hold, args.new_name))
    return 0


def _run_remove_hold_command(client: AnglesClient, args: argparse.Namespace) -> int:
    removed_count = client.remove_hold(args.hold)
    print(f"removed_angles={removed_count}")
    return 0


def _run_add_angle_command(client: AnglesClient, args: argparse.Namespace) -> int:
    angle = client.add_angle(args.hold, saw=args.saw, value=args.value)
    print(angle.angle_id)
    return 0


def _run_update_angle_command(client: AnglesClient, args: argparse.Namespace) -> int:
    """Handle update-angle command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    changes: dict[str, Any] = {}
    if args.value is not None:
        changes["value"] = args.value
    if args.saw is not None:
        changes["saw"] = args.saw
    if args.clear_drawing:
        changes["drawing"] = None
    angle = client.update_angle(args.angle_id, **changes)
    print(f"{angle.angle_id}\t{angle.saw}\t{angle_label(angle.value)}")
    return 0


def _run_remove_angle_command(client: AnglesClient, args: argparse.Namespace) -> int:
    client.remove_angle(args.angle_id)
    print(args.angle_id)
    return 0


def _run_set_drawing_command(client: AnglesClient, args: argparse.Namespace) -> int:
    angle = client.set_drawing_from_file(args.angle_id, args.image)
    print(angle.angle_id)
    return 0


def _run_set_cover_command(client: AnglesClient, args: argparse.Namespace) -> int:
    client.set_cover_from_file(args.hold, args.image)
    print(args.hold)
    return 0


def _run_remove_cover_command(client: AnglesClient, args: argparse.Namespace) -> int:
    client.remove_cover_image(args.hold)
    print(args.hold)
    return 0


def _run_export_command(client: AnglesClient, args: argparse.Namespace) -> int:
    print(client.export_to_file(args.output))
    return 0


def _run_import_command(client: AnglesClient, args: argparse.Namespace) -> int:
    snapshot = client.import_from_file(args.input)
    print(f"holds={len(snapshot.holds)}")
    print(f"angles={len(snapshot.angles)}")
    return 0


def _run_backups_command(client: AnglesClient, args: argparse.Namespace) -> int:
    for index, entry in enumerate(client.list_backups()):
        data = entry.data if isinstance(entry.data, dict) else {}
        holds = data.get("holds")
        angles = data.get("angles")
        print(
            f"{index}\t{format_last_modified(entry.timestamp_ms)}\t"
            f"{len(holds) if isinstance(holds, list) else 0}\t"
            f"{len(angles) if isinstance(angles, list) else 0}"
        )
    return 0


def _run_restore_backup_command(client: AnglesClient, args: argparse.Namespace) -> int:
    snapshot = client.restore_backup(args.index)
    print(f"holds={len(snapshot.holds)}")
    print(f"angles={len(snapshot.angles)}")
    return 0


def _run_apply_command(client: AnglesClient, args: argparse.Namespace) -> int:
    for line in execute_edit_script_file(client, args.script):
        print(line)
    return 0


_COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "show": _run_show_command,
    "holds": _run_holds_command,
    "angles": _run_angles_command,
    "add-hold": _run_add_hold_command,
    "rename-hold": _run_rename_hold_command,
    "remove-hold": _run_remove_hold_command,
    "add-angle": _run_add_angle_command,
    "update-angle": _run_update_angle_command,
    "remove-angle": _run_remove_angle_command,
    "set-drawing": _run_set_drawing_command,
    "set-cover": _run_set_cover_command,
    "remove-cover": _run_remove_cover_command,
    "export": _run_export_command,
    "import": _run_import_command,
    "backups": _run_backups_command,
    "restore-backup": _run_restore_backup_command,
    "apply": _run_apply_command,
}


def _add_read_commands(subparsers: Any) -> None:
    """Register read-only subcommands."""
    subparsers.add_parser("show", help="Summarize the catalog")
    subparsers.add_parser("holds", help="List holds with angle counts")
    parser = subparsers.add_parser("angles", help="List angles")
    parser.add_argument("--hold", help="Only angles of this hold")
    parser.add_argument("--saw", choices=SUPPORTED_SAWS, help="Only angles of this saw")
    subparsers.add_parser("backups", help="List backup entries, newest first")


def _add_hold_commands(subparsers: Any) -> None:
    """Register hold subcommands."""
    parser = subparsers.add_parser("add-hold", help="Add a hold")
    parser.add_argument("name", help="Hold name")
    parser = subparsers.add_parser("rename-hold", help="Rename a hold and its angles")
    parser.add_argument("hold", help="Current hold name")
    parser.add_argument("new_name", help="New hold name")
    parser = subparsers.add_parser("remove-hold", help="Delete a hold with its angles")
    parser.add_argument("hold", help="Hold name")


def _add_angle_commands(subparsers: Any) -> None:
    """Register angle subcommands."""
    parser = subparsers.add_parser("add-angle", help="Add an angle to a hold")
    parser.add_argument("hold", help="Hold name")
    parser.add_argument("--value", default="0", help="Angle in degrees, clamped to [0,90]")
    parser.add_argument("--saw", choices=SUPPORTED_SAWS, help="Saw category")
    parser = subparsers.add_parser("update-angle", help="Patch an angle")
    parser.add_argument("angle_id", help="Angle id")
    parser.add_argument("--value", help="Angle in degrees, clamped to [0,90]")
    parser.add_argument("--saw", choices=SUPPORTED_SAWS, help="Saw category")
    parser.add_argument("--clear-drawing", action="store_true", help="Remove the drawing")
    parser = subparsers.add_parser("remove-angle", help="Delete an angle")
    parser.add_argument("angle_id", help="Angle id")
    parser = subparsers.add_parser("set-drawing", help="Attach an image as an angle's drawing")
    parser.add_argument("angle_id", help="Angle id")
    parser.add_argument("image", help="Image file path")


def _add_cover_commands(subparsers: Any) -> None:
    """Register cover-image subcommands."""
    parser = subparsers.add_parser("set-cover", help="Attach a hold's cover image")
    parser.add_argument("hold", help="Hold name")
    parser.add_argument("image", help="Image file path")
    parser = subparsers.add_parser("remove-cover", help="Detach a hold's cover image")
    parser.add_argument("hold", help="Hold name")


def _add_transfer_commands(subparsers: Any) -> None:
    """Register export, import, backup, and script subcommands."""
    parser = subparsers.add_parser("export", help="Write the catalog to a JSON file")
    parser.add_argument(
        "--output", default=DEFAULT_EXPORT_FILE_NAME, help="Destination JSON file"
    )
    parser = subparsers.add_parser("import", help="Replace the catalog from a JSON file")
    parser.add_argument("input", help="JSON file to import")
    parser = subparsers.add_parser("restore-backup", help="Restore a backup entry")
    parser.add_argument("--index", type=int, default=0, help="Backup index, 0 is newest")
    parser = subparsers.add_parser("apply", help="Run a YAML edit script")
    parser.add_argument("script", help="Edit script path")
