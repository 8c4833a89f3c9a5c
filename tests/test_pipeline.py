"""Unit tests for the alert run orchestration.

Covers the hourly run end to end against an in-memory database:
- bucket selection and schedule advancement
- per-alert and per-bucket failure isolation
- the in-process run lock
- instant alert gating on recent postings
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest

from job_alerts.config.models import AppConfig, LinksConfig
from job_alerts.domain.models import AlertFrequency
from job_alerts.matching.matcher import JobMatcher
from job_alerts.notifications.service import NotificationService
from job_alerts.persistence import (
    AlertRepository,
    PersistenceError,
    close_database,
    get_session,
    init_database,
)
from job_alerts.pipeline import AlertRunner
from tests.helpers import (
    FIXED_NOW,
    RecordingSender,
    make_alert,
    make_company,
    make_job,
    make_profile,
    seed,
)


@pytest.fixture
def database():
    init_database("sqlite:///:memory:")
    seed(
        profiles=[make_profile(), make_profile("user-2", "bob@example.com", "Bob")],
        companies=[make_company()],
    )
    yield
    close_database()


@pytest.fixture
def sender():
    return RecordingSender()


def make_runner(sender, **kwargs):
    service = NotificationService(
        sender=sender,
        links=LinksConfig(base_url="https://jobs.example.com"),
        sleep=Mock(),
    )
    return AlertRunner(app_config=AppConfig(), notification_service=service, **kwargs)


def load_alert(alert_id):
    with get_session() as session:
        return AlertRepository(session).get_by_id(alert_id)


class TestEndToEnd:
    def test_daily_digest_sent_and_rescheduled(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.due_buckets == ["daily_am", "instant"]
        assert result.processed == 1
        assert result.matched_alerts == 1
        assert result.emails_sent == 1
        assert result.schedules_updated == 1
        assert not result.had_errors

        assert len(sender.sent) == 1
        email = sender.sent[0]
        assert email.to == "jane@example.com"
        assert "Software Engineer" in email.html
        assert "View Job" in email.html
        assert "Apply Now" in email.html
        assert "https://jobs.example.com/jobs/job-1" in email.html

        alert = load_alert("alert-1")
        assert alert.last_triggered_at == FIXED_NOW
        assert alert.next_scheduled_at == datetime(2025, 11, 5, 8, 0, tzinfo=timezone.utc)

    def test_weekly_digest_on_monday(self, database, sender):
        monday = datetime(2025, 11, 3, 9, 0, tzinfo=timezone.utc)
        seed(
            jobs=[make_job(created_at=monday - timedelta(days=3))],
            alerts=[make_alert(frequency="weekly")],
        )

        result = make_runner(sender).run_once(monday)

        assert result.due_buckets == ["weekly", "instant"]
        assert result.emails_sent == 1
        assert load_alert("alert-1").next_scheduled_at == datetime(
            2025, 11, 10, 9, 0, tzinfo=timezone.utc
        )

    def test_alerts_of_other_buckets_untouched(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert(frequency="daily_pm")])

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.processed == 0
        assert sender.sent == []

    def test_inactive_alert_not_processed(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert(is_active=False)])

        assert make_runner(sender).run_once(FIXED_NOW).processed == 0

    def test_off_slot_hour_processes_nothing_but_instant(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])

        result = make_runner(sender).run_once(FIXED_NOW.replace(hour=13))

        assert result.due_buckets == ["instant"]
        assert result.processed == 0

    def test_clock_used_when_no_time_given(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])

        result = make_runner(sender, clock=lambda: FIXED_NOW).run_once()

        assert result.emails_sent == 1

    def test_response_body(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.to_response() == {"success": True, "processed": 1}


class TestNoWork:
    def test_zero_matches_leaves_schedule_unchanged(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert(keywords=["chef"])])

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.processed == 1
        assert result.matched_alerts == 0
        assert sender.sent == []
        alert = load_alert("alert-1")
        assert alert.last_triggered_at is None
        assert alert.next_scheduled_at is None

    def test_missing_profile_is_skipped(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert(user_id="ghost")])

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.processed == 1
        assert result.skipped_no_email == 1
        assert not result.had_errors
        assert sender.sent == []


class TestFailureIsolation:
    def test_send_failure_does_not_stop_other_alerts(self, database):
        sender = RecordingSender(fail_for=["jane@example.com"])
        seed(
            jobs=[make_job()],
            alerts=[make_alert("alert-jane"), make_alert("alert-bob", user_id="user-2")],
        )

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.processed == 2
        assert result.emails_sent == 1
        assert result.had_errors
        assert [(f.stage, f.bucket, f.alert_id) for f in result.failures] == [
            ("send", "daily_am", "alert-jane")
        ]
        assert [email.to for email in sender.sent] == ["bob@example.com"]
        assert load_alert("alert-jane").last_triggered_at is None
        assert load_alert("alert-bob").last_triggered_at == FIXED_NOW

    def test_unexpected_sender_error_does_not_stop_other_alerts(self, database):
        sender = RecordingSender(fail_for=["jane@example.com"], error_type=RuntimeError)
        seed(
            jobs=[make_job()],
            alerts=[make_alert("alert-jane"), make_alert("alert-bob", user_id="user-2")],
        )

        result = make_runner(sender).run_once(FIXED_NOW)

        assert result.emails_sent == 1
        assert [(f.stage, f.alert_id) for f in result.failures] == [("send", "alert-jane")]
        assert [email.to for email in sender.sent] == ["bob@example.com"]
        assert load_alert("alert-jane").last_triggered_at is None
        assert load_alert("alert-bob").last_triggered_at == FIXED_NOW

    def test_exception_from_notification_service_recorded(self, database, sender):
        seed(
            jobs=[make_job()],
            alerts=[make_alert("alert-jane"), make_alert("alert-bob", user_id="user-2")],
        )
        runner = make_runner(sender)
        real_send = runner.notification_service.send_digest

        def send_digest(alert, postings):
            if alert.id == "alert-jane":
                raise KeyError("src")
            return real_send(alert, postings)

        runner.notification_service.send_digest = send_digest
        result = runner.run_once(FIXED_NOW)

        assert [(f.stage, f.bucket, f.alert_id) for f in result.failures] == [
            ("send", "daily_am", "alert-jane")
        ]
        assert result.schedules_updated == 1
        assert [email.to for email in sender.sent] == ["bob@example.com"]

    def test_match_failure_recorded(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])

        with patch.object(JobMatcher, "find_matches", side_effect=PersistenceError("timeout")):
            result = make_runner(sender).run_once(FIXED_NOW)

        assert [(f.stage, f.alert_id, f.error) for f in result.failures] == [
            ("match", "alert-1", "timeout")
        ]
        assert sender.sent == []

    def test_update_failure_after_send(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])

        with patch.object(
            AlertRepository, "mark_triggered", side_effect=PersistenceError("read-only")
        ):
            result = make_runner(sender).run_once(FIXED_NOW)

        assert result.emails_sent == 1
        assert result.schedules_updated == 0
        assert [(f.stage, f.alert_id) for f in result.failures] == [("update", "alert-1")]
        assert load_alert("alert-1").last_triggered_at is None

    def test_fetch_failure_isolated_to_bucket(self, database, sender):
        seed(
            jobs=[make_job(created_at=FIXED_NOW - timedelta(minutes=20))],
            alerts=[make_alert("daily"), make_alert("instant", frequency="instant")],
        )
        real_fetch = AlertRepository.get_active_alerts

        def flaky(self, frequency):
            if AlertFrequency(frequency) == AlertFrequency.DAILY_AM:
                raise PersistenceError("daily query failed")
            return real_fetch(self, frequency)

        with patch.object(AlertRepository, "get_active_alerts", flaky):
            result = make_runner(sender).run_once(FIXED_NOW)

        assert [(f.stage, f.bucket, f.alert_id) for f in result.failures] == [
            ("fetch", "daily_am", None)
        ]
        assert result.processed == 1
        assert result.emails_sent == 1
        assert load_alert("instant").last_triggered_at == FIXED_NOW
        assert load_alert("instant").next_scheduled_at == FIXED_NOW + timedelta(hours=1)


class TestInstantAlerts:
    def test_not_processed_without_recent_postings(self, database, sender):
        seed(
            jobs=[make_job(created_at=FIXED_NOW - timedelta(hours=3))],
            alerts=[make_alert(frequency="instant")],
        )

        result = make_runner(sender).run_once(FIXED_NOW.replace(hour=11))

        assert result.due_buckets == ["instant"]
        assert result.processed == 0

    def test_processed_when_postings_are_recent(self, database, sender):
        now = FIXED_NOW.replace(hour=11)
        seed(
            jobs=[make_job(created_at=now - timedelta(minutes=15))],
            alerts=[make_alert(frequency="instant")],
        )

        result = make_runner(sender).run_once(now)

        assert result.processed == 1
        assert result.emails_sent == 1


class TestRunLock:
    def test_concurrent_run_is_skipped(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])
        runner = make_runner(sender)

        runner._lock.acquire()
        try:
            result = runner.run_once(FIXED_NOW)
        finally:
            runner._lock.release()

        assert result.skipped
        assert result.processed == 0
        assert sender.sent == []

    def test_repeated_run_in_same_hour_sends_again(self, database, sender):
        seed(jobs=[make_job()], alerts=[make_alert()])
        runner = make_runner(sender)

        runner.run_once(FIXED_NOW)
        runner.run_once(FIXED_NOW + timedelta(minutes=5))

        assert len(sender.sent) == 2
