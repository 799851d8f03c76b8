"""
Tree Scanner

Walks a directory tree and captures the size and modification time of
every regular file, keyed by its path relative to the tree root.

Author: mirrorkeep Project
License: MIT
"""

import os
from pathlib import Path, PurePath
from typing import List, Optional, Union

from ..utils.file_ops import PARTIAL_SUFFIX
from ..utils.logger import get_logger
from .errors import ScanError
from .models import FileRecord, Snapshot

logger = get_logger(__name__)


def _relative_key(root: Path, path: str) -> str:
    """Root-relative path in POSIX form, identical across platforms and roots."""
    return PurePath(os.path.relpath(path, root)).as_posix()


def scan_tree(root: Union[str, os.PathLike]) -> Snapshot:
    """
    Capture a snapshot of all regular files under ``root``.

    Directory symlinks are not descended into. Symlinks that resolve to a
    regular file are recorded with the target's metadata; broken links and
    special files are skipped. Temporary files left behind by an interrupted
    copy (``PARTIAL_SUFFIX``) are not part of any tree.

    Args:
        root: Tree root directory

    Returns:
        Snapshot mapping relative paths to FileRecords

    Raises:
        ScanError: If the root is missing or unreadable, or if any directory
            listing or file stat fails
    """
    root_path = Path(root)

    if not root_path.exists():
        raise ScanError(str(root_path), "root does not exist")
    if not root_path.is_dir():
        raise ScanError(str(root_path), "root is not a directory")

    snapshot: Snapshot = {}
    pending: List[str] = [str(root_path)]

    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(entry.path)
                        continue

                    record = _record_for(root_path, entry)
                    if record is not None:
                        snapshot[record.relative_path] = record
        except OSError as e:
            failed = e.filename or directory
            raise ScanError(str(root_path), e.strerror or str(e), path=str(failed)) from e

    return snapshot


def _record_for(root_path: Path, entry: os.DirEntry) -> Optional[FileRecord]:
    if entry.name.endswith(PARTIAL_SUFFIX):
        logger.debug(f"Skipping leftover partial copy: {entry.path}")
        return None

    try:
        if not entry.is_file():
            return None
        stat = entry.stat()
    except OSError as e:
        raise ScanError(str(root_path), e.strerror or str(e), path=entry.path) from e

    key = _relative_key(root_path, entry.path)
    return FileRecord(
        relative_path=key,
        modified_at=stat.st_mtime_ns,
        size=stat.st_size,
    )


class TreeScanner:
    """
    Scanner bound to one tree root.

    Keeps the totals of the most recent scan for reporting.
    """

    def __init__(self, root: Union[str, os.PathLike]):
        """
        Initialize scanner.

        Args:
            root: Tree root directory
        """
        self.root = Path(root)
        self.file_count = 0
        self.total_bytes = 0

    def scan(self) -> Snapshot:
        """Scan the tree. See ``scan_tree``."""
        logger.debug(f"Scanning {self.root}")

        snapshot = scan_tree(self.root)

        self.file_count = len(snapshot)
        self.total_bytes = sum(record.size for record in snapshot.values())
        logger.info(
            f"Scanned {self.root}: {self.file_count} files, "
            f"{self.total_bytes / (1024 * 1024):.2f} MB"
        )
        return snapshot
