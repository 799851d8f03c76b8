"""
Action Executor

Applies a plan to the filesystem with a bounded pool of worker threads.
Every action is independent; the only ordering constraint is inside a
replace, where the old backup copy is moved to the tombstone tree before
the new version is copied in.

Author: mirrorkeep Project
License: MIT
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Union

from ..utils.logger import get_logger
from ..utils.file_ops import copy_file, ensure_directory, move_file
from .errors import ActionError
from .models import Action, ActionKind, ActionOutcome, Plan, SyncReport
from .tombstone import name_for

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def default_concurrency() -> int:
    """Worker count used when none is configured."""
    return os.cpu_count() or 4


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _describe(error: OSError) -> str:
    if error.strerror:
        return f"{type(error).__name__}: {error.strerror}"
    return f"{type(error).__name__}: {error}"


class ActionExecutor:
    """
    Executes plans against a source, backup and tombstone tree.

    Workers never share state: each returns an ActionOutcome and the calling
    thread merges the outcomes into the SyncReport once they complete.
    """

    def __init__(
        self,
        source_root: PathLike,
        backup_root: PathLike,
        tombstone_root: PathLike,
        concurrency: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize executor.

        Args:
            source_root: Tree files are copied from
            backup_root: Tree files are copied to
            tombstone_root: Tree superseded and removed files are moved to
            concurrency: Maximum number of concurrent actions
            clock: Source of the instants used for tombstone names
        """
        if concurrency is None:
            concurrency = default_concurrency()
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self.source_root = Path(source_root)
        self.backup_root = Path(backup_root)
        self.tombstone_root = Path(tombstone_root)
        self.concurrency = concurrency
        self.clock = clock

    def execute(self, plan: Plan) -> SyncReport:
        """
        Run every action of the plan.

        Per-file failures are collected into the report and never stop the
        remaining actions.

        Args:
            plan: Plan to apply

        Returns:
            SyncReport with counts and the errors that occurred
        """
        report = SyncReport(planned=len(plan))
        if plan.is_empty:
            return report

        logger.info(f"Executing {len(plan)} actions with {self.concurrency} workers")

        with ThreadPoolExecutor(
            max_workers=self.concurrency,
            thread_name_prefix="mirrorkeep-worker"
        ) as pool:
            futures = [pool.submit(self.run_action, action) for action in plan]
            for future in as_completed(futures):
                report.record(future.result())

        return report

    def run_action(self, action: Action) -> ActionOutcome:
        """Execute a single action and capture its outcome."""
        try:
            if action.kind is ActionKind.COPY:
                self._copy(action)
                tombstone_path = None
            elif action.kind is ActionKind.REPLACE:
                tombstone_path = self._relocate(action)
                self._copy(action)
            elif action.kind is ActionKind.TOMBSTONE:
                tombstone_path = self._relocate(action)
            else:
                raise ValueError(f"Unknown action kind: {action.kind}")
        except ActionError as e:
            logger.error(str(e))
            return ActionOutcome(action=action, error=e)

        if action.kind is ActionKind.TOMBSTONE:
            logger.info(f"Tombstoned {action.relative_path} -> {tombstone_path}")
        elif action.kind is ActionKind.REPLACE:
            logger.info(f"Replaced {action.relative_path} (previous version at {tombstone_path})")
        else:
            logger.info(f"Copied new file {action.relative_path}")

        return ActionOutcome(action=action, tombstone_path=tombstone_path)

    def source_path(self, relative_path: str) -> Path:
        return self.source_root.joinpath(*PurePosixPath(relative_path).parts)

    def backup_path(self, relative_path: str) -> Path:
        return self.backup_root.joinpath(*PurePosixPath(relative_path).parts)

    def _copy(self, action: Action) -> None:
        source = self.source_path(action.relative_path)
        destination = self.backup_path(action.relative_path)

        try:
            ensure_directory(destination.parent)
        except OSError as e:
            raise ActionError(action.relative_path, action.kind, "mkdir", _describe(e)) from e

        try:
            copy_file(source, destination)
        except OSError as e:
            raise ActionError(action.relative_path, action.kind, "copy", _describe(e)) from e

    def _relocate(self, action: Action) -> Path:
        backup = self.backup_path(action.relative_path)
        destination = name_for(action.relative_path, self.tombstone_root, self.clock())

        try:
            move_file(backup, destination)
        except OSError as e:
            raise ActionError(action.relative_path, action.kind, "relocate", _describe(e)) from e

        return destination


def execute_plan(
    plan: Plan,
    source_root: PathLike,
    backup_root: PathLike,
    tombstone_root: PathLike,
    concurrency: Optional[int] = None
) -> SyncReport:
    """Apply ``plan`` with a one-off ActionExecutor."""
    executor = ActionExecutor(source_root, backup_root, tombstone_root, concurrency)
    return executor.execute(plan)
