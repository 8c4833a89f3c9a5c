"""Unit tests for the hourly scheduler service."""

import threading
from unittest.mock import Mock
from zoneinfo import ZoneInfoNotFoundError

import pytest
from apscheduler.triggers.cron import CronTrigger

from job_alerts.scheduler import SchedulerService
from job_alerts.scheduler.service import JOB_ID


@pytest.fixture
def scheduler():
    service = SchedulerService(run_callable=Mock(), timezone_name="Europe/London")
    yield service
    if service.is_running():
        service.shutdown(wait=False)


class TestSchedulerService:
    def test_initialization(self):
        run = Mock()
        shutdown_event = threading.Event()

        service = SchedulerService(run_callable=run, shutdown_event=shutdown_event)

        assert service.run_callable is run
        assert str(service.timezone) == "UTC"
        assert not service.is_running()
        assert service.get_next_run_time() is None

    def test_start_registers_hourly_job(self, scheduler):
        scheduler.start()

        job = scheduler.scheduler.get_job(JOB_ID)
        assert scheduler.is_running()
        assert isinstance(job.trigger, CronTrigger)
        assert job.max_instances == 1
        assert job.coalesce is True

        next_run = scheduler.get_next_run_time()
        assert next_run.minute == 0
        assert next_run.second == 0

    def test_shutdown_sets_event(self):
        shutdown_event = threading.Event()
        service = SchedulerService(run_callable=Mock(), shutdown_event=shutdown_event)
        service.start()

        service.shutdown(wait=False)

        assert not service.is_running()
        assert shutdown_event.is_set()

    def test_shutdown_when_not_started(self):
        shutdown_event = threading.Event()
        service = SchedulerService(run_callable=Mock(), shutdown_event=shutdown_event)

        service.shutdown()

        assert shutdown_event.is_set()

    def test_trigger_now_runs_synchronously(self, scheduler):
        scheduler.trigger_now()

        scheduler.run_callable.assert_called_once_with()

    def test_unknown_timezone(self):
        with pytest.raises(ZoneInfoNotFoundError):
            SchedulerService(run_callable=Mock(), timezone_name="Nowhere/Special")
