"""Public SDK surface for Angles.

This module provides a stable import path for catalog users.
It re-exports the primary client and typed snapshot models.
"""

from __future__ import annotations

from core.clock import Clock, ManualClock, SystemClock
from core.config import AnglesConfig
from core.edit_script_execution import execute_edit_script_file
from core.types import Angle, BackupEntry, CanonicalSnapshot, ExportEnvelope
from store.catalog_sdk import AnglesClient
from store.key_value import FileKeyValueStorage, MemoryKeyValueStorage
from store.migrator import migrate
from store.persistence_store import PersistenceStore

__all__ = [
    "Angle",
    "AnglesClient",
    "AnglesConfig",
    "BackupEntry",
    "CanonicalSnapshot",
    "Clock",
    "ExportEnvelope",
    "FileKeyValueStorage",
    "ManualClock",
    "MemoryKeyValueStorage",
    "PersistenceStore",
    "SystemClock",
    "execute_edit_script_file",
    "migrate",
]
