"""Run orchestration for job alert processing."""

import threading
from contextlib import AbstractContextManager
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from job_alerts.config.models import AppConfig
from job_alerts.domain.models import AlertFrequency, JobAlert
from job_alerts.logging import get_logger
from job_alerts.logging.context import log_context
from job_alerts.matching.matcher import JobMatcher
from job_alerts.notifications.service import NotificationService
from job_alerts.persistence.database import get_session
from job_alerts.persistence.repositories import AlertRepository, JobRepository
from job_alerts.scheduling.classifier import due_buckets
from job_alerts.scheduling.next_run import compute_next
from job_alerts.utils.timestamps import ensure_utc, to_storage, utc_now

from .models import AlertFailure, AlertRunResult

logger = get_logger(__name__, component="runner")

BUCKET_ORDER = [
    AlertFrequency.DAILY_AM,
    AlertFrequency.DAILY_PM,
    AlertFrequency.WEEKLY,
    AlertFrequency.INSTANT,
]

INSTANT_LOOKBACK = timedelta(hours=1)


class _RunState:
    """Mutable counters for one run, turned into an AlertRunResult at the end."""

    def __init__(self):
        self.processed = 0
        self.matched_alerts = 0
        self.emails_sent = 0
        self.schedules_updated = 0
        self.skipped_no_email = 0
        self.failures: List[AlertFailure] = []

    def fail(self, stage: str, bucket: str, alert_id: Optional[str], error: Exception) -> None:
        self.failures.append(
            AlertFailure(stage=stage, bucket=bucket, alert_id=alert_id, error=str(error))
        )


class AlertRunner:
    """
    Processes every alert that is due at a given time.

    A run classifies the current time into schedule buckets, fetches the
    active alerts of each bucket, matches each alert against recent postings,
    sends one digest per alert with matches and advances that alert's
    schedule. Failures are isolated: a bucket that cannot be fetched or an
    alert that cannot be matched, sent or updated is recorded in the result
    and the run moves on.
    """

    def __init__(
        self,
        app_config: AppConfig,
        notification_service: NotificationService,
        session_factory: Callable[[], AbstractContextManager[Session]] = get_session,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            app_config: Application configuration (schedule slots)
            notification_service: Service that sends digests
            session_factory: Context manager factory yielding sessions
            clock: Source of the current time when run_once() gets none
        """
        self.app_config = app_config
        self.notification_service = notification_service
        self.session_factory = session_factory
        self.clock = clock
        self._lock = threading.Lock()

    def run_once(self, now: Optional[datetime] = None) -> AlertRunResult:
        """
        Execute one pass over the alerts due at ``now``.

        Args:
            now: Time of the run (defaults to the clock); treated as UTC if naive

        Returns:
            AlertRunResult with counters and isolated failures. ``skipped`` is
            set when another run in this process still holds the lock.
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Alert run skipped: previous run still in progress",
                    extra={"event": "alerts.run.skipped", "reason": "lock_held"},
                )
            return AlertRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id):
                return self._run(ensure_utc(now or self.clock()), run_started_at)
        finally:
            self._lock.release()

    def _run(self, now: datetime, run_started_at: datetime) -> AlertRunResult:
        schedule = self.app_config.schedule
        local_now = now.astimezone(schedule.tzinfo())
        due = due_buckets(local_now, schedule)
        buckets = [bucket for bucket in BUCKET_ORDER if bucket in due]

        logger.info(
            "Alert run started",
            extra={
                "event": "alerts.run.started",
                "now": to_storage(now),
                "local_time": local_now.isoformat(),
                "due_buckets": [bucket.value for bucket in buckets],
            },
        )

        state = _RunState()

        for bucket in buckets:
            alerts = self._fetch_bucket(bucket, now, state)
            for alert in alerts:
                self._process_alert(alert, bucket, now, state)

        result = AlertRunResult(
            run_started_at=run_started_at,
            run_finished_at=utc_now(),
            due_buckets=[bucket.value for bucket in buckets],
            processed=state.processed,
            matched_alerts=state.matched_alerts,
            emails_sent=state.emails_sent,
            schedules_updated=state.schedules_updated,
            skipped_no_email=state.skipped_no_email,
            failures=state.failures,
        )

        logger.info(
            f"Alert run completed: {result.processed} processed, "
            f"{result.emails_sent} sent, {len(result.failures)} failed",
            extra={
                "event": "alerts.run.completed",
                "duration_ms": int(result.total_duration_seconds * 1000),
                "processed": result.processed,
                "matched_alerts": result.matched_alerts,
                "emails_sent": result.emails_sent,
                "schedules_updated": result.schedules_updated,
                "skipped_no_email": result.skipped_no_email,
                "failure_count": len(result.failures),
                "had_errors": result.had_errors,
            },
        )

        return result

    def _fetch_bucket(
        self, bucket: AlertFrequency, now: datetime, state: _RunState
    ) -> List[JobAlert]:
        """Load the active alerts of one bucket; failures empty the bucket."""
        try:
            with self.session_factory() as session:
                if bucket == AlertFrequency.INSTANT:
                    recent = JobRepository(session).count_created_since(now - INSTANT_LOOKBACK)
                    if recent == 0:
                        logger.debug(
                            "No postings in the last hour; instant alerts not processed",
                            extra={"event": "alerts.bucket.idle", "bucket": bucket.value},
                        )
                        return []

                alerts = AlertRepository(session).get_active_alerts(bucket)

        except Exception as e:
            state.fail("fetch", bucket.value, None, e)
            logger.error(
                f"Failed to fetch {bucket.value} alerts: {e}",
                extra={
                    "event": "alerts.bucket.fetch_failed",
                    "bucket": bucket.value,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return []

        logger.info(
            f"Fetched {len(alerts)} {bucket.value} alert(s)",
            extra={
                "event": "alerts.bucket.fetched",
                "bucket": bucket.value,
                "alert_count": len(alerts),
            },
        )
        return alerts

    def _process_alert(
        self, alert: JobAlert, bucket: AlertFrequency, now: datetime, state: _RunState
    ) -> None:
        """Match, send and reschedule one alert. Never raises."""
        state.processed += 1

        with log_context(alert_id=alert.id, frequency=alert.frequency):
            if not alert.user_email:
                state.skipped_no_email += 1
                logger.info(
                    f"Skipping alert {alert.id}: owner has no email address",
                    extra={"event": "alert.skipped", "reason": "no_email"},
                )
                return

            try:
                with self.session_factory() as session:
                    matches = JobMatcher(session).find_matches(alert, now)
            except Exception as e:
                state.fail("match", bucket.value, alert.id, e)
                logger.error(
                    f"Matching failed for alert {alert.id}: {e}",
                    extra={"event": "alert.match.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )
                return

            if not matches:
                return

            state.matched_alerts += 1

            try:
                result = self.notification_service.send_digest(alert, matches)
            except Exception as e:
                state.fail("send", bucket.value, alert.id, e)
                logger.error(
                    f"Sending digest failed for alert {alert.id}: {e}",
                    extra={"event": "alert.send.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )
                return

            if not result.is_success():
                state.failures.append(
                    AlertFailure(
                        stage="send",
                        bucket=bucket.value,
                        alert_id=alert.id,
                        error=result.error or result.status,
                    )
                )
                return

            state.emails_sent += 1

            next_scheduled_at = compute_next(alert.frequency, now, self.app_config.schedule)
            try:
                with self.session_factory() as session:
                    AlertRepository(session).mark_triggered(alert.id, now, next_scheduled_at)
            except Exception as e:
                state.fail("update", bucket.value, alert.id, e)
                logger.error(
                    f"Failed to update schedule for alert {alert.id}: {e}",
                    extra={"event": "alert.schedule.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )
                return

            state.schedules_updated += 1
            logger.info(
                f"Alert {alert.id} rescheduled for {to_storage(next_scheduled_at)}",
                extra={
                    "event": "alert.schedule.updated",
                    "last_triggered_at": to_storage(now),
                    "next_scheduled_at": to_storage(next_scheduled_at),
                },
            )
