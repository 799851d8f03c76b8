"""
Unit Tests for the Sync Service and Scheduler

Tests cycle execution, cooperative shutdown and job registration.

Author: mirrorkeep Project
License: MIT
"""

from threading import Event
from unittest.mock import Mock

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from mirrorkeep.config.schema import Config, SchedulingConfig, SyncConfig
from mirrorkeep.core.errors import ScanError, SetupError
from mirrorkeep.core.models import SyncReport
from mirrorkeep.scheduler.task_scheduler import SYNC_JOB_ID, TaskScheduler, build_trigger
from mirrorkeep.service import SyncService


@pytest.fixture
def config(trees):
    source, backup, tombstone = trees
    return Config(
        sync=SyncConfig(
            source_root=str(source),
            backup_root=str(backup),
            tombstone_root=str(tombstone),
            concurrency=2
        ),
        scheduling=SchedulingConfig(interval_seconds=3600, run_on_start=False)
    )


class TestBuildTrigger:
    """Test suite for trigger construction."""

    def test_interval_trigger_by_default(self):
        """Test that the interval is used when no cron is set."""
        trigger = build_trigger(SchedulingConfig(interval_seconds=120))

        assert isinstance(trigger, IntervalTrigger)
        assert trigger.interval.total_seconds() == 120

    def test_cron_takes_precedence(self):
        """Test that a cron expression wins over the interval."""
        trigger = build_trigger(SchedulingConfig(cron="*/5 * * * *"))

        assert isinstance(trigger, CronTrigger)


class TestTaskScheduler:
    """Test suite for TaskScheduler."""

    def test_add_sync_job(self):
        """Test that the sync job is registered once."""
        scheduler = TaskScheduler(SchedulingConfig(run_on_start=False))
        scheduler.set_sync_callback(lambda: None)

        scheduler.start()
        try:
            scheduler.add_sync_job()
            scheduler.add_sync_job()
            jobs = scheduler.get_jobs()
        finally:
            scheduler.stop()

        assert [job['id'] for job in jobs] == [SYNC_JOB_ID]
        assert jobs[0]['next_run'] is not None

    def test_disabled_scheduling_adds_no_job(self):
        """Test that disabling scheduling registers nothing."""
        scheduler = TaskScheduler(SchedulingConfig(enabled=False))

        scheduler.add_sync_job()

        assert scheduler.get_jobs() == []

    def test_callback_errors_are_contained(self):
        """Test that an exploding callback does not escape the job."""
        scheduler = TaskScheduler(SchedulingConfig())
        callback = Mock(side_effect=RuntimeError("boom"))
        scheduler.set_sync_callback(callback)

        scheduler._execute_sync()

        callback.assert_called_once()

    def test_start_and_stop(self):
        """Test the scheduler lifecycle."""
        scheduler = TaskScheduler(SchedulingConfig(run_on_start=False))

        scheduler.start()
        assert scheduler.running is True

        scheduler.stop()
        assert scheduler.running is False

    def test_stop_without_start(self):
        """Test that stopping an idle scheduler is a no-op."""
        TaskScheduler(SchedulingConfig()).stop()


class TestSyncService:
    """Test suite for SyncService."""

    def test_run_cycle_syncs(self, config, trees, make_file):
        """Test that a cycle mirrors the source."""
        source, backup, _ = trees
        make_file(source, "a.txt", "hello")
        service = SyncService(config)

        report = service.run_cycle()

        assert report.copied == 1
        assert (backup / "a.txt").read_text() == "hello"
        assert service.cycles_run == 1
        assert service.last_report is report

    def test_stop_requested_skips_cycle(self, config):
        """Test that no cycle starts after a stop request."""
        orchestrator = Mock()
        stop_event = Event()
        service = SyncService(config, stop_event=stop_event, orchestrator=orchestrator)

        stop_event.set()
        result = service.run_cycle()

        assert result is None
        orchestrator.sync.assert_not_called()

    @pytest.mark.parametrize("error", [
        ScanError("/src", "root does not exist"),
        SetupError("/backup", "Permission denied"),
    ])
    def test_structural_errors_do_not_escape(self, config, error):
        """Test that a failed cycle is logged and the service keeps going."""
        orchestrator = Mock()
        orchestrator.sync.side_effect = [error, SyncReport(copied=2)]
        service = SyncService(config, orchestrator=orchestrator)

        assert service.run_cycle() is None
        assert service.run_cycle().copied == 2
        assert service.cycles_run == 1

    def test_start_prepares_roots_and_schedules(self, config, trees):
        """Test that starting bootstraps the roots and registers the job."""
        _, backup, tombstone = trees
        service = SyncService(config)

        service.start()
        try:
            assert backup.is_dir()
            assert tombstone.is_dir()
            assert [job['id'] for job in service.scheduler.get_jobs()] == [SYNC_JOB_ID]
        finally:
            service.stop()

        assert service.stop_event.is_set()
        assert service.scheduler.running is False

    def test_request_stop_sets_event(self, config):
        """Test the signal handler."""
        service = SyncService(config, orchestrator=Mock())

        service.request_stop(15, None)

        assert service.stop_event.is_set()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
