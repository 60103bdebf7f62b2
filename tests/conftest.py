"""
Pytest configuration and shared fixtures for pkgboot tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any
import zipfile

import pytest
import yaml

from pkgboot.logging import SilentLogger, set_global_logger


@pytest.fixture(autouse=True)
def silent_logger():
    """Reset the global logger so CLI tests do not leak verbose loggers."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("pkgboot.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def make_nupkg():
    """
    Factory fixture building zip-format packages in memory.

    Usage:
        data = make_nupkg({"tools/paket.exe": b"MZ..."})
    """

    def _make(members: dict[str, bytes], path: Path | None = None) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            for name, content in members.items():
                zf.writestr(name, content)
        data = buf.getvalue()
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        return data

    return _make


@pytest.fixture
def sample_config(tmp_test_dir: Path) -> dict[str, Any]:
    """
    Provide an effective configuration with GitHub first and NuGet second.

    Paths point into the temporary directory.
    """
    return {
        "package": {"id": "Paket", "executable": "paket.exe", "archive_path": None},
        "target": str(tmp_test_dir / ".paket" / "paket.exe"),
        "prerelease": False,
        "work_dir": None,
        "state_file": str(tmp_test_dir / ".paket" / "pkgboot.state.json"),
        "force_source": None,
        "prefer_source": None,
        "sources": [
            {"type": "github", "repo": "fsprojects/Paket", "asset": "paket.exe"},
            {"type": "nuget", "feed": "https://nuget.example.com/api/v2"},
        ],
        "network": {"proxy": None, "headers": {}, "timeout": 5, "user_agent": "t"},
    }
