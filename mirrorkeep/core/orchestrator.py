"""
Sync Orchestrator

Composes scanning, diffing and execution into a single sync cycle. This is
the one entry point the service layer and the CLI call.

Author: mirrorkeep Project
License: MIT
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union, TYPE_CHECKING

from ..utils.logger import get_logger
from ..utils.file_ops import ensure_directory
from .diff_engine import diff_snapshots
from .errors import SetupError
from .executor import ActionExecutor, utc_now
from .models import Plan, SyncReport
from .scanner import TreeScanner

if TYPE_CHECKING:
    from ..config.schema import SyncConfig

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def _is_within(path: Path, other: Path) -> bool:
    """True if ``path`` is ``other`` or lies underneath it, after resolving symlinks."""
    path = path.resolve()
    other = other.resolve()
    return path == other or other in path.parents


class SyncOrchestrator:
    """
    Mirrors a source tree onto a backup tree, keeping tombstones.

    Holds no state between cycles: every call to ``sync`` rescans both
    trees and plans from what is on disk.
    """

    def __init__(
        self,
        source_root: PathLike,
        backup_root: PathLike,
        tombstone_root: PathLike,
        concurrency: Optional[int] = None,
        mtime_tolerance_ns: int = 0,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize orchestrator.

        Args:
            source_root: Tree to back up
            backup_root: Mirror of the source tree
            tombstone_root: Where removed and superseded files are kept
            concurrency: Worker count for the execution phase
            mtime_tolerance_ns: Timestamp slack used when diffing
            clock: Source of instants for reports and tombstone names
        """
        self.source_root = Path(source_root).absolute()
        self.backup_root = Path(backup_root).absolute()
        self.tombstone_root = Path(tombstone_root).absolute()
        self.mtime_tolerance_ns = mtime_tolerance_ns
        self.clock = clock

        self.executor = ActionExecutor(
            self.source_root,
            self.backup_root,
            self.tombstone_root,
            concurrency=concurrency,
            clock=clock
        )

    @classmethod
    def from_config(cls, sync_config: "SyncConfig") -> "SyncOrchestrator":
        """Build an orchestrator from the ``sync`` section of the configuration."""
        return cls(
            source_root=sync_config.source_root,
            backup_root=sync_config.backup_root,
            tombstone_root=sync_config.tombstone_root,
            concurrency=sync_config.concurrency,
            mtime_tolerance_ns=sync_config.mtime_tolerance_ns
        )

    def prepare(self) -> None:
        """
        Create the backup and tombstone roots if they are missing.

        Raises:
            SetupError: If a root cannot be created, or the trees overlap
                so that one would be scanned as part of another
        """
        self.check_layout()

        for root in (self.backup_root, self.tombstone_root):
            existed = root.is_dir()
            try:
                ensure_directory(root)
            except OSError as e:
                raise SetupError(str(root), e.strerror or str(e)) from e
            if not existed:
                logger.info(f"Created directory: {root}")

    def check_layout(self) -> None:
        """
        Refuse root layouts where one tree would be scanned as part of another.

        Raises:
            SetupError: If any root is, or lies inside, another root
        """
        roots = {
            "source": self.source_root,
            "backup": self.backup_root,
            "tombstone": self.tombstone_root,
        }
        for name, root in roots.items():
            for other_name, other in roots.items():
                if name != other_name and _is_within(root, other):
                    raise SetupError(
                        str(root),
                        f"{name} root must not be inside the {other_name} root ({other})"
                    )

    def plan(self) -> Plan:
        """
        Scan both trees and compute the plan without applying it.

        Nothing is created or modified. A backup root that does not exist
        yet is planned against as an empty tree.

        Raises:
            ScanError: If either tree cannot be scanned
        """
        source_snapshot = TreeScanner(self.source_root).scan()
        if os.path.lexists(self.backup_root):
            backup_snapshot = TreeScanner(self.backup_root).scan()
        else:
            logger.debug(f"Backup root {self.backup_root} does not exist yet")
            backup_snapshot = {}
        return diff_snapshots(source_snapshot, backup_snapshot, self.mtime_tolerance_ns)

    def sync(self) -> SyncReport:
        """
        Run one complete sync cycle.

        Returns:
            SyncReport listing counts and every per-file failure

        Raises:
            SetupError: If the backup or tombstone root cannot be created
            ScanError: If the source or backup tree cannot be scanned
        """
        started_at = self.clock()
        logger.info(f"Starting backup check: {self.source_root} -> {self.backup_root}")

        self.prepare()
        plan = self.plan()

        counts = plan.counts()
        logger.info(
            f"Planned {len(plan)} actions "
            f"(copy={counts['copy']}, replace={counts['replace']}, tombstone={counts['tombstone']})"
        )

        report = self.executor.execute(plan)
        report.started_at = started_at
        report.finished_at = self.clock()

        if report.has_errors:
            logger.warning(
                f"Backup check finished with {len(report.errors)} errors: {report.summary()}"
            )
        else:
            logger.info(f"Backup check finished: {report.summary()}")

        return report


def sync(
    source_root: PathLike,
    backup_root: PathLike,
    tombstone_root: PathLike,
    concurrency: Optional[int] = None,
    mtime_tolerance_ns: int = 0
) -> SyncReport:
    """
    Mirror ``source_root`` onto ``backup_root`` once.

    Args:
        source_root: Tree to back up
        backup_root: Mirror of the source tree
        tombstone_root: Where removed and superseded files are kept
        concurrency: Worker count for the execution phase
        mtime_tolerance_ns: Timestamp slack used when diffing

    Returns:
        SyncReport for the cycle

    Raises:
        SetupError: If the backup or tombstone root cannot be created
        ScanError: If the source or backup tree cannot be scanned
    """
    orchestrator = SyncOrchestrator(
        source_root,
        backup_root,
        tombstone_root,
        concurrency=concurrency,
        mtime_tolerance_ns=mtime_tolerance_ns
    )
    return orchestrator.sync()
