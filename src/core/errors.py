"""Angles exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class AnglesError(Exception):
    """Base exception for all Angles failures."""


class AnglesConfigError(AnglesError):
    """Raised for invalid runtime configuration."""


class AnglesImportError(AnglesError):
    """Raised when an import file cannot be read or parsed."""


class AnglesCapacityError(AnglesError):
    """Raised when a serialized snapshot exceeds the storage ceiling."""

    def __init__(self, message: str, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(message)
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class AnglesStorageError(AnglesError):
    """Raised for durable key-value read and write failures."""


class AnglesStoreError(AnglesError):
    """Raised for persistence store lifecycle misuse."""


class AnglesCatalogError(AnglesError):
    """Raised for invalid catalog edits."""


class AnglesImageError(AnglesError):
    """Raised when an image cannot be encoded as an inline reference."""


class AnglesEditScriptError(AnglesError):
    """Raised for invalid or unsupported edit-script files."""
