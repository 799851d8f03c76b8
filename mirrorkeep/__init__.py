"""
mirrorkeep

Incremental directory mirroring that never deletes: removed and
overwritten backup files are moved to a tombstone tree.

Author: mirrorkeep Project
License: MIT
"""

from .core import (
    ActionError,
    FileRecord,
    Plan,
    ScanError,
    SetupError,
    SyncOrchestrator,
    SyncReport,
    sync,
)

__version__ = "0.1.0"
__all__ = [
    'ActionError', 'FileRecord', 'Plan', 'ScanError', 'SetupError',
    'SyncOrchestrator', 'SyncReport', 'sync',
]
