"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_angles_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer ANGLES_* settings out of test runs."""
    for variable_name in (
        "ANGLES_DATA_ROOT",
        "ANGLES_DEBOUNCE_MS",
        "ANGLES_MAX_BACKUPS",
        "ANGLES_MAX_STORAGE_BYTES",
    ):
        monkeypatch.delenv(variable_name, raising=False)
