"""
Repository-level pytest configuration.

Provides the project root and points the configuration loader at the bundled
``config/config.yaml`` unless the caller already chose a file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _config_path_default(project_root: Path) -> Generator[None, None, None]:
    """Use the bundled configuration file if RESTACTOR_CONFIG is not set."""
    os.environ.setdefault("RESTACTOR_CONFIG", str(project_root / "config" / "config.yaml"))
    yield
