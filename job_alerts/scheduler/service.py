"""Scheduler service for hourly alert runs in daemon mode."""

import threading
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from job_alerts.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "process-job-alerts"
MISFIRE_GRACE_SECONDS = 15 * 60


class SchedulerService:
    """
    Wraps APScheduler to trigger an alert run at the top of every hour.

    Schedule slots are hour-granular, so firing at minute 0 of each hour in
    the schedule timezone visits every slot exactly once. Uses
    BackgroundScheduler so the main thread can handle signals and shutdown.
    """

    def __init__(
        self,
        run_callable: Callable[[], object],
        timezone_name: str = "UTC",
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            run_callable: Function to call on each run (e.g. runner.run_once)
            timezone_name: IANA timezone the hourly trigger is evaluated in
            shutdown_event: Optional event to set on shutdown for coordination
        """
        self.run_callable = run_callable
        self.timezone = ZoneInfo(timezone_name)
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # Prevent overlapping runs
                "coalesce": True,  # Collapse missed runs into one
                "misfire_grace_time": MISFIRE_GRACE_SECONDS,
            },
            timezone=self.timezone,
        )

    def start(self) -> None:
        """Register the hourly job and start the scheduler thread."""
        trigger = CronTrigger(minute=0, timezone=self.timezone)

        self.scheduler.add_job(
            func=self.run_callable,
            trigger=trigger,
            id=JOB_ID,
            name="Process job alerts",
            replace_existing=True,
        )

        self.scheduler.start()

        next_run = self.get_next_run_time()
        logger.info(
            "Scheduler started: alerts processed hourly at minute 0",
            extra={
                "event": "scheduler.started",
                "timezone": str(self.timezone),
                "next_run_time": next_run.isoformat() if next_run else None,
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shutdown the scheduler gracefully.

        Args:
            wait: If True, wait for a running alert pass to complete
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> None:
        """Run the alert pass synchronously in the current thread."""
        logger.info("Triggering immediate alert run", extra={"event": "scheduler.trigger_now"})
        self.run_callable()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self):
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
