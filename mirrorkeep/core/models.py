"""
Sync Data Model

File records, snapshots, plans and the per-cycle report.

Author: mirrorkeep Project
License: MIT
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import ActionError


@dataclass(frozen=True)
class FileRecord:
    """Metadata of one regular file, keyed by its root-relative POSIX path."""
    relative_path: str
    modified_at: int  # st_mtime_ns
    size: int


# relative_path -> FileRecord for every regular file in one tree
Snapshot = Dict[str, FileRecord]


class ActionKind(Enum):
    """Kinds of action a plan can contain."""
    COPY = "copy"
    REPLACE = "replace"
    TOMBSTONE = "tombstone"


@dataclass(frozen=True)
class Action:
    """A single planned change to the backup tree."""
    kind: ActionKind
    relative_path: str

    def __str__(self) -> str:
        return f"{self.kind.value} {self.relative_path}"


@dataclass(frozen=True)
class Plan:
    """
    Ordered, immutable set of actions computed from two snapshots.

    Actions on different paths are independent; a path appears at most once.
    """
    actions: Tuple[Action, ...] = ()

    def __post_init__(self):
        seen = set()
        for action in self.actions:
            if action.relative_path in seen:
                raise ValueError(f"Duplicate action for path: {action.relative_path}")
            seen.add(action.relative_path)

    def __iter__(self) -> Iterator[Action]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    @property
    def is_empty(self) -> bool:
        return not self.actions

    def of_kind(self, kind: ActionKind) -> List[Action]:
        return [action for action in self.actions if action.kind is kind]

    def counts(self) -> Dict[str, int]:
        """Number of actions per kind, keyed by kind value."""
        counts = {kind.value: 0 for kind in ActionKind}
        for action in self.actions:
            counts[action.kind.value] += 1
        return counts


@dataclass
class ActionOutcome:
    """Result of executing one action, produced by a worker."""
    action: Action
    error: Optional[ActionError] = None
    tombstone_path: Optional[Path] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    """
    Result of one sync cycle.

    Only the thread that owns the report mutates it; workers hand back
    ActionOutcome objects which are merged with ``record``.
    """
    copied: int = 0
    replaced: int = 0
    tombstoned: int = 0
    errors: List[ActionError] = field(default_factory=list)
    planned: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def record(self, outcome: ActionOutcome) -> None:
        """Merge a single action outcome into the counters."""
        if outcome.error is not None:
            self.errors.append(outcome.error)
            return

        kind = outcome.action.kind
        if kind is ActionKind.COPY:
            self.copied += 1
        elif kind is ActionKind.REPLACE:
            self.replaced += 1
        elif kind is ActionKind.TOMBSTONE:
            self.tombstoned += 1

    @property
    def succeeded(self) -> int:
        return self.copied + self.replaced + self.tombstoned

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def failed_paths(self) -> List[str]:
        return [error.relative_path for error in self.errors]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def summary(self) -> str:
        return (
            f"copied={self.copied} replaced={self.replaced} "
            f"tombstoned={self.tombstoned} errors={len(self.errors)}"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'copied': self.copied,
            'replaced': self.replaced,
            'tombstoned': self.tombstoned,
            'planned': self.planned,
            'errors': [error.to_dict() for error in self.errors],
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
            'duration_seconds': self.duration_seconds,
        }
