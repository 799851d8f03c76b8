"""
Sync Errors

Exception taxonomy for the sync engine. Structural failures (ScanError,
SetupError) abort a cycle; ActionError describes a single file's failure
and is collected into the SyncReport instead of being raised.

Author: mirrorkeep Project
License: MIT
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ActionKind


class MirrorkeepError(Exception):
    """Base class for all mirrorkeep errors."""


class ScanError(MirrorkeepError):
    """A tree could not be scanned completely."""

    def __init__(self, root: str, message: str, path: Optional[str] = None):
        self.root = root
        self.path = path
        self.message = message
        location = path or root
        super().__init__(f"Scan of {root} failed at {location}: {message}")


class SetupError(MirrorkeepError):
    """The backup or tombstone root could not be created."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Cannot prepare {path}: {message}")


class ActionError(MirrorkeepError):
    """
    A single file action failed.

    Attributes:
        relative_path: Path of the file relative to the tree roots
        kind: The action that failed
        step: Which sub-step failed ("mkdir", "relocate" or "copy")
        message: Human readable cause
    """

    def __init__(self, relative_path: str, kind: "ActionKind", step: str, message: str):
        self.relative_path = relative_path
        self.kind = kind
        self.step = step
        self.message = message
        super().__init__(f"{kind.value} {relative_path} failed during {step}: {message}")

    def to_dict(self) -> dict:
        return {
            'relative_path': self.relative_path,
            'action': self.kind.value,
            'step': self.step,
            'message': self.message,
        }
