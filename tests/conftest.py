"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_ambient_session() -> Iterator[None]:
    """Start and end every test without an ambient session dictionary."""
    from storage.container import ambient_container

    ambient_container().unbind()
    yield
    ambient_container().unbind()
