"""
Sync Service

Long-running wrapper that triggers sync cycles on a schedule and shuts
down cleanly between cycles.

Author: mirrorkeep Project
License: MIT
"""

import signal
from threading import Event
from typing import Optional

from .utils.logger import get_logger
from .config.schema import Config
from .core.errors import ScanError, SetupError
from .core.models import SyncReport
from .core.orchestrator import SyncOrchestrator
from .scheduler.task_scheduler import TaskScheduler

logger = get_logger(__name__)


class SyncService:
    """
    Runs SyncOrchestrator cycles until asked to stop.

    The stop event is checked before each cycle. A cycle that has already
    started always runs to completion.
    """

    def __init__(
        self,
        config: Config,
        stop_event: Optional[Event] = None,
        orchestrator: Optional[SyncOrchestrator] = None
    ):
        """
        Initialize service.

        Args:
            config: Application configuration
            stop_event: Cancellation token shared with the caller
            orchestrator: Orchestrator to use (built from config if None)
        """
        self.config = config
        self.stop_event = stop_event or Event()
        self.orchestrator = orchestrator or SyncOrchestrator.from_config(config.sync)
        self.scheduler = TaskScheduler(config.scheduling)
        self.scheduler.set_sync_callback(self.run_cycle)

        self.cycles_run = 0
        self.last_report: Optional[SyncReport] = None

        logger.info("SyncService initialized")

    def run_cycle(self) -> Optional[SyncReport]:
        """
        Run one sync cycle unless a stop was requested.

        Structural failures are logged and leave the service running so the
        next trigger can retry.

        Returns:
            The cycle's SyncReport, or None if skipped or failed
        """
        if self.stop_event.is_set():
            logger.info("Stop requested, skipping sync cycle")
            return None

        try:
            report = self.orchestrator.sync()
        except SetupError as e:
            logger.error(f"Sync setup failed: {e}")
            return None
        except ScanError as e:
            logger.error(f"Sync aborted, tree could not be scanned: {e}")
            return None

        self.cycles_run += 1
        self.last_report = report
        for error in report.errors:
            logger.warning(f"Failed: {error.relative_path} ({error.step}): {error.message}")
        return report

    def start(self):
        """Start scheduled cycles in the background."""
        self.orchestrator.prepare()
        self.scheduler.add_sync_job()
        self.scheduler.start()
        logger.info("SyncService started")

    def stop(self):
        """Request shutdown and wait for any running cycle to finish."""
        self.stop_event.set()
        self.scheduler.stop(wait=True)
        logger.info("SyncService stopped")

    def request_stop(self, signum=None, frame=None):
        """Signal handler: ask the service to stop after the current cycle."""
        if signum is not None:
            logger.info(f"Received signal {signum}, stopping after current cycle")
        self.stop_event.set()

    def run_forever(self):
        """Run until SIGINT or SIGTERM, then shut down cleanly."""
        signal.signal(signal.SIGINT, self.request_stop)
        signal.signal(signal.SIGTERM, self.request_stop)

        self.start()
        try:
            while not self.stop_event.wait(timeout=1.0):
                pass
        finally:
            self.stop()
