"""
mirrorkeep Core Module

Change detection, planning and execution of backup sync cycles.

Author: mirrorkeep Project
License: MIT
"""

from .errors import MirrorkeepError, ScanError, SetupError, ActionError
from .models import FileRecord, Snapshot, ActionKind, Action, Plan, ActionOutcome, SyncReport
from .scanner import TreeScanner, scan_tree
from .diff_engine import diff_snapshots, is_modified
from .tombstone import name_for
from .executor import ActionExecutor, execute_plan
from .orchestrator import SyncOrchestrator, sync

__all__ = [
    'MirrorkeepError', 'ScanError', 'SetupError', 'ActionError',
    'FileRecord', 'Snapshot', 'ActionKind', 'Action', 'Plan', 'ActionOutcome', 'SyncReport',
    'TreeScanner', 'scan_tree',
    'diff_snapshots', 'is_modified',
    'name_for',
    'ActionExecutor', 'execute_plan',
    'SyncOrchestrator', 'sync',
]
