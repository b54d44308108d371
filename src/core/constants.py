"""Core constants used across Angles modules.

This module centralizes storage keys, schema markers, and limits.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".angles")
SNAPSHOT_STORAGE_KEY = "angles_proto_v1"
LAST_MODIFIED_STORAGE_KEY = f"{SNAPSHOT_STORAGE_KEY}_lastModified"
BACKUPS_STORAGE_KEY = f"{SNAPSHOT_STORAGE_KEY}_backups"
STORAGE_FILE_SUFFIX = ".json"
CURRENT_SCHEMA_VERSION = 1
EXPORT_APP_NAME = "AnglesProto"
DEFAULT_EXPORT_FILE_NAME = "angles-db.json"
DEFAULT_MAX_BACKUPS = 5
DEFAULT_MAX_STORAGE_BYTES = 4 * 1024 * 1024
DEFAULT_DEBOUNCE_MS = 500
INLINE_IMAGE_PREFIX = "data:image/"
DEFAULT_MAX_IMAGE_BYTES = 1024 * 1024
ANGLE_MIN_VALUE = 0.0
ANGLE_MAX_VALUE = 90.0
DEFAULT_ANGLE_VALUE = 0.0
SAW_PRIMARY = "main"
SAW_SECONDARY = "stefan"
SUPPORTED_SAWS = (SAW_PRIMARY, SAW_SECONDARY)
