"""Tests for alert-to-posting matching."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from job_alerts.matching import JobMatcher, recency_cutoff
from job_alerts.persistence import close_database, get_session, init_database
from tests.helpers import FIXED_NOW, make_alert, make_company, make_job, seed


@pytest.fixture
def database():
    init_database("sqlite:///:memory:")
    seed(companies=[make_company()])
    yield
    close_database()


def find(alert, now=FIXED_NOW):
    with get_session() as session:
        return JobMatcher(session).find_matches(alert, now)


class TestRecencyCutoff:
    @pytest.mark.parametrize(
        "frequency,window",
        [
            ("instant", timedelta(hours=1)),
            ("daily_am", timedelta(hours=24)),
            ("daily_pm", timedelta(hours=24)),
            ("weekly", timedelta(days=7)),
        ],
    )
    def test_windows(self, frequency, window):
        assert recency_cutoff(frequency, FIXED_NOW) == FIXED_NOW - window

    def test_unknown_frequency_rejected(self):
        with pytest.raises(ValueError):
            recency_cutoff("monthly", FIXED_NOW)


class TestKeywords:
    def test_any_keyword_matches_title(self, database):
        seed(jobs=[make_job(title="React Developer", description="Frontend work")])
        alert = make_alert(keywords=["designer", "react"], location=None)

        assert [job.id for job in find(alert)] == ["job-1"]

    def test_keyword_matches_description_case_insensitively(self, database):
        seed(jobs=[make_job(title="Backend role", description="We use PYTHON daily")])
        alert = make_alert(keywords=["python"], location=None)

        assert len(find(alert)) == 1

    def test_no_keyword_present(self, database):
        seed(jobs=[make_job(title="Accountant", description="Ledgers")])
        alert = make_alert(keywords=["engineer"], location=None)

        assert find(alert) == []

    def test_empty_keywords_match_everything_recent(self, database):
        seed(jobs=[make_job("a", title="Chef"), make_job("b", title="Nurse")])
        alert = make_alert(keywords=[], location=None)

        assert {job.id for job in find(alert)} == {"a", "b"}

    def test_like_wildcards_are_literal(self, database):
        seed(jobs=[make_job("plain", title="Sales lead"), make_job("pct", title="Top 1% closer")])
        alert = make_alert(keywords=["1%"], location=None)

        assert [job.id for job in find(alert)] == ["pct"]


class TestFilters:
    def test_location_substring(self, database):
        seed(
            jobs=[
                make_job("ldn", location="Central London, UK"),
                make_job("mcr", location="Manchester, UK"),
            ]
        )
        alert = make_alert(keywords=[], location="london")

        assert [job.id for job in find(alert)] == ["ldn"]

    def test_employment_type_and_level(self, database):
        seed(
            jobs=[
                make_job("ft-senior", employment_type="full_time", job_level="senior"),
                make_job("ft-mid", employment_type="full_time", job_level="mid"),
                make_job("contract-senior", employment_type="contract", job_level="senior"),
            ]
        )
        alert = make_alert(employment_types=["full_time"], job_levels=["senior", "executive"])

        assert [job.id for job in find(alert)] == ["ft-senior"]

    def test_salary_bounds(self, database):
        seed(
            jobs=[
                make_job("low", salary_min=40000, salary_max=70000),
                make_job("inside", salary_min=55000, salary_max=85000),
                make_job("high", salary_min=60000, salary_max=120000),
                make_job("unknown", salary_min=None, salary_max=None),
            ]
        )
        alert = make_alert(salary_min=50000, salary_max=90000)

        assert [job.id for job in find(alert)] == ["inside"]

    def test_zero_salary_bound_is_unset(self, database):
        seed(jobs=[make_job(salary_min=None, salary_max=None)])
        alert = make_alert(salary_min=0, salary_max=0)

        assert len(find(alert)) == 1

    def test_inactive_postings_excluded(self, database):
        seed(jobs=[make_job("open"), make_job("closed", status="closed"), make_job("draft", status="draft")])

        assert [job.id for job in find(make_alert())] == ["open"]


class TestRecency:
    def test_weekly_window(self, database):
        seed(
            jobs=[
                make_job("eight-days", created_at=FIXED_NOW - timedelta(days=8)),
                make_job("three-days", created_at=FIXED_NOW - timedelta(days=3)),
            ]
        )

        matches = find(make_alert(frequency="weekly"))

        assert [job.id for job in matches] == ["three-days"]

    def test_daily_window(self, database):
        seed(
            jobs=[
                make_job("yesterday", created_at=FIXED_NOW - timedelta(hours=25)),
                make_job("today", created_at=FIXED_NOW - timedelta(hours=23)),
            ]
        )

        assert [job.id for job in find(make_alert(frequency="daily_pm"))] == ["today"]

    def test_instant_window(self, database):
        seed(
            jobs=[
                make_job("fresh", created_at=FIXED_NOW - timedelta(minutes=30)),
                make_job("older", created_at=FIXED_NOW - timedelta(minutes=90)),
            ]
        )

        assert [job.id for job in find(make_alert(frequency="instant"))] == ["fresh"]

    def test_cutoff_is_exclusive(self, database):
        seed(jobs=[make_job(created_at=FIXED_NOW - timedelta(hours=24))])

        assert find(make_alert()) == []


class TestResults:
    def test_newest_first_with_company(self, database):
        seed(
            jobs=[
                make_job("older", created_at=FIXED_NOW - timedelta(hours=6)),
                make_job("newer", created_at=FIXED_NOW - timedelta(hours=1)),
            ]
        )

        matches = find(make_alert())

        assert [job.id for job in matches] == ["newer", "older"]
        assert all(job.company.name == "Acme" for job in matches)

    def test_logs_match_count(self, database):
        seed(jobs=[make_job()])
        log = Mock()

        with get_session() as session:
            JobMatcher(session, logger_instance=log).find_matches(make_alert(), FIXED_NOW)

        extra = log.info.call_args.kwargs["extra"]
        assert extra["event"] == "alert.match.found"
        assert extra["match_count"] == 1
