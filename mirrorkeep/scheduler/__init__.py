"""
Scheduler Module

Periodic sync job management.

Author: mirrorkeep Project
License: MIT
"""

from .task_scheduler import TaskScheduler, build_trigger

__all__ = ['TaskScheduler', 'build_trigger']
