"""
Task Scheduler

APScheduler integration for periodic sync cycles.

Author: mirrorkeep Project
License: MIT
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from datetime import datetime, timezone
from typing import Callable, Optional

from ..utils.logger import get_logger
from ..config.schema import SchedulingConfig

logger = get_logger(__name__)

SYNC_JOB_ID = "sync_cycle"


def build_trigger(scheduling: SchedulingConfig):
    """
    Build the APScheduler trigger for a scheduling configuration.

    A cron expression takes precedence over the interval.

    Args:
        scheduling: Scheduling configuration

    Returns:
        CronTrigger or IntervalTrigger
    """
    if scheduling.cron:
        # Format: "minute hour day month day_of_week"
        parts = scheduling.cron.split()
        return CronTrigger(
            minute=parts[0],
            hour=parts[1],
            day=parts[2],
            month=parts[3],
            day_of_week=parts[4],
            timezone='UTC'
        )
    return IntervalTrigger(seconds=scheduling.interval_seconds, timezone='UTC')


class TaskScheduler:
    """
    Runs the sync callback on a schedule.

    Only one cycle runs at a time; triggers missed while a cycle is still
    running are coalesced into a single run.
    """

    def __init__(self, scheduling: SchedulingConfig):
        """
        Initialize task scheduler.

        Args:
            scheduling: Scheduling configuration
        """
        self.scheduling = scheduling
        self.scheduler = BackgroundScheduler(
            timezone='UTC',
            job_defaults={
                'coalesce': True,  # Combine missed executions
                'max_instances': 1  # Only one instance per job
            }
        )

        self._sync_callback: Optional[Callable[[], None]] = None

        logger.info("TaskScheduler initialized")

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self):
        """Start the scheduler."""
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        self.scheduler.start()
        logger.info("Scheduler started")

    def stop(self, wait: bool = True):
        """
        Stop the scheduler.

        Args:
            wait: Block until a cycle that is already running has finished
        """
        if not self.scheduler.running:
            return

        self.scheduler.shutdown(wait=wait)
        logger.info("Scheduler stopped")

    def set_sync_callback(self, callback: Callable[[], None]):
        """
        Set the function run on every trigger.

        Args:
            callback: Function taking no arguments
        """
        self._sync_callback = callback
        logger.info("Sync callback registered")

    def add_sync_job(self):
        """Add the periodic sync job based on configuration."""
        if not self.scheduling.enabled:
            logger.warning("Scheduling disabled, no sync job added")
            return

        trigger = build_trigger(self.scheduling)
        next_run_time = datetime.now(timezone.utc) if self.scheduling.run_on_start else None

        job_options = {}
        if next_run_time is not None:
            job_options['next_run_time'] = next_run_time

        self.scheduler.add_job(
            func=self._execute_sync,
            trigger=trigger,
            id=SYNC_JOB_ID,
            name='Backup Sync Cycle',
            replace_existing=True,
            **job_options
        )

        schedule = self.scheduling.cron or f"every {self.scheduling.interval_seconds}s"
        logger.info(f"Added sync job with schedule: {schedule}")

    def _execute_sync(self):
        """Execute the scheduled sync cycle."""
        logger.debug("Executing scheduled sync")

        if self._sync_callback:
            try:
                self._sync_callback()
            except Exception as e:
                logger.error(f"Error in sync callback: {e}", exc_info=True)
        else:
            logger.warning("No sync callback registered")

    def get_jobs(self) -> list:
        """
        Get list of scheduled jobs.

        Returns:
            List of job information dictionaries
        """
        jobs = []

        for job in self.scheduler.get_jobs():
            next_run = getattr(job, 'next_run_time', None)

            jobs.append({
                'id': job.id,
                'name': job.name,
                'next_run': next_run.isoformat() if next_run else None,
                'trigger': str(job.trigger)
            })

        return jobs
