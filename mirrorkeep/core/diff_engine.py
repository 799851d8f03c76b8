"""
Diff Engine

Compares a source snapshot against a backup snapshot and plans the copy,
replace and tombstone actions that bring the backup in line.

Author: mirrorkeep Project
License: MIT
"""

from typing import List

from .models import Action, ActionKind, FileRecord, Plan, Snapshot


def is_modified(source: FileRecord, backup: FileRecord, mtime_tolerance_ns: int = 0) -> bool:
    """
    Decide whether the source version supersedes the backed up one.

    A newer timestamp or any size change counts as a modification. Edits
    that keep both the size and an equal or older timestamp go undetected.

    Args:
        source: Record from the source tree
        backup: Record for the same path in the backup tree
        mtime_tolerance_ns: How much newer the source must be before the
            timestamp alone triggers a replace

    Returns:
        True if the backup copy should be replaced
    """
    if source.size != backup.size:
        return True
    return source.modified_at > backup.modified_at + mtime_tolerance_ns


def diff_snapshots(source: Snapshot, backup: Snapshot, mtime_tolerance_ns: int = 0) -> Plan:
    """
    Compute the plan that mirrors ``source`` onto ``backup``.

    Pure and deterministic: copies and replaces come first in path order,
    followed by tombstones in path order.

    Args:
        source: Snapshot of the source tree
        backup: Snapshot of the backup tree
        mtime_tolerance_ns: Timestamp slack, see ``is_modified``

    Returns:
        Plan with at most one action per relative path
    """
    if mtime_tolerance_ns < 0:
        raise ValueError("mtime_tolerance_ns must be >= 0")

    actions: List[Action] = []

    for relative_path in sorted(source):
        existing = backup.get(relative_path)
        if existing is None:
            actions.append(Action(ActionKind.COPY, relative_path))
        elif is_modified(source[relative_path], existing, mtime_tolerance_ns):
            actions.append(Action(ActionKind.REPLACE, relative_path))

    for relative_path in sorted(backup):
        if relative_path not in source:
            actions.append(Action(ActionKind.TOMBSTONE, relative_path))

    return Plan(tuple(actions))
