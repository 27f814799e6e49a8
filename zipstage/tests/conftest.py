"""Pytest configuration for zipstage tests."""
from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import pytest

# Ensure project root is importable
PROJECT_ROOT = Path(__file__).resolve().parents[2]  # directory holding the zipstage package
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from zipstage.session import ArchiveContext  # noqa: E402


def _make_zip(path: Path, members: dict[str, bytes]) -> Path:
    """Write *members* (name -> data) to a fresh zip at *path*, in dict order."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


@pytest.fixture()
def context(tmp_path: Path):
    ctx = ArchiveContext(tmp_path / "staging")
    yield ctx
    ctx.cleanup_all_open_sessions()


@pytest.fixture()
def sample_zip(tmp_path: Path) -> Path:
    """Archive with a nested text file, a directory marker and a disk image."""
    return _make_zip(
        tmp_path / "sample.zip",
        {"a/b.txt": b"hello", "a/": b"", "c.d64": bytes(range(256)) * 4},
    )


@pytest.fixture()
def make_zip():
    return _make_zip
