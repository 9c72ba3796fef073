"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from dirinv.inventory.access_log import AccessLog


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config, theme and the default access log out of the real home."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Tree with a 4096-byte file and a subdirectory holding a 1-byte file.

    Layout::

        t/
        ├── a.txt      (4096 bytes)
        └── b/
            └── c.txt  (1 byte)
    """
    root = tmp_path / "t"
    (root / "b").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"x" * 4096)
    (root / "b" / "c.txt").write_bytes(b"y")
    return root


@pytest.fixture
def access_log_path(tmp_path: Path) -> Path:
    """Location for a per-test access log file."""
    return tmp_path / "logs" / "access.log"


@pytest.fixture
def access_log(access_log_path: Path) -> Iterator[AccessLog]:
    """Access log writing to ``access_log_path``, closed after the test."""
    log = AccessLog(access_log_path)
    yield log
    log.close()
