"""
Shared test fixtures.

Author: mirrorkeep Project
License: MIT
"""

import logging
import os
from pathlib import Path

import pytest


NS = 1_000_000_000


@pytest.fixture(autouse=True)
def reset_mirrorkeep_logger():
    """Undo handlers installed by setup_logging so tests stay isolated."""
    yield
    logger = logging.getLogger("mirrorkeep")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def trees(tmp_path):
    """Source, backup and tombstone roots; only the source exists up front."""
    source = tmp_path / "source"
    source.mkdir()
    return source, tmp_path / "backup", tmp_path / "deleted"


@pytest.fixture
def make_file():
    """Create a file with given content and, optionally, an mtime in seconds."""

    def _make(root: Path, relative_path: str, content: str = "data", mtime: int = None) -> Path:
        path = root.joinpath(*relative_path.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        if mtime is not None:
            os.utime(path, ns=(mtime * NS, mtime * NS))
        return path

    return _make


@pytest.fixture
def list_files():
    """All files under a root as sorted relative POSIX paths."""

    def _list(root: Path) -> list:
        if not root.exists():
            return []
        return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())

    return _list
