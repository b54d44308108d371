"""Runtime configuration model for Angles.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_MAX_BACKUPS,
    DEFAULT_MAX_STORAGE_BYTES,
)
from core.errors import AnglesConfigError


@dataclass(frozen=True)
class AnglesConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local directory backing the key-value storage.
        debounce_seconds: Quiet period before a pending snapshot is written.
        max_backups: Number of backup entries kept in the ring.
        max_storage_bytes: Ceiling for one serialized snapshot.
    """

    data_root: Path
    debounce_seconds: float
    max_backups: int
    max_storage_bytes: int

    @classmethod
    def from_env(cls) -> "AnglesConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            AnglesConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("ANGLES_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        debounce_ms = _parse_int_setting(
            "ANGLES_DEBOUNCE_MS", os.getenv("ANGLES_DEBOUNCE_MS"), DEFAULT_DEBOUNCE_MS, 0
        )
        max_backups = _parse_int_setting(
            "ANGLES_MAX_BACKUPS", os.getenv("ANGLES_MAX_BACKUPS"), DEFAULT_MAX_BACKUPS, 1
        )
        max_storage_bytes = _parse_int_setting(
            "ANGLES_MAX_STORAGE_BYTES",
            os.getenv("ANGLES_MAX_STORAGE_BYTES"),
            DEFAULT_MAX_STORAGE_BYTES,
            1,
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            debounce_seconds=debounce_ms / 1000.0,
            max_backups=max_backups,
            max_storage_bytes=max_storage_bytes,
        )


def _parse_int_setting(
    variable_name: str,
    raw_value: str | None,
    default_value: int,
    minimum: int,
) -> int:
    """Parse one integer environment value.

    Args:
        variable_name: Environment variable name for error messages.
        raw_value: Raw string from environment, None when unset.
        default_value: Value used when the variable is unset.
        minimum: Smallest accepted value.

    Returns:
        Parsed integer setting.

    Raises:
        AnglesConfigError: If value is not an integer or below minimum.
    """
    if raw_value is None or not raw_value.strip():
        return default_value
    try:
        parsed_value = int(raw_value)
    except ValueError as error:
        raise AnglesConfigError(
            f"Invalid {variable_name} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a numeric value."
        ) from error
    if parsed_value < minimum:
        raise AnglesConfigError(
            f"Invalid {variable_name} value: {parsed_value} is below the minimum of {minimum}."
        )
    return parsed_value
