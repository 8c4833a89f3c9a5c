"""Find the postings an alert should be notified about.

The alert's criteria are translated into SQL predicates and evaluated by the
database, so only matching rows are loaded.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import Session

from job_alerts.domain.models import AlertFrequency, JobAlert, JobPosting
from job_alerts.persistence.filters import contains_ci
from job_alerts.persistence.repositories import JobRepository
from job_alerts.persistence.schema import JobModel
from job_alerts.utils.timestamps import ensure_utc, to_storage

logger = logging.getLogger(__name__)

RECENCY_WINDOWS = {
    AlertFrequency.INSTANT: timedelta(hours=1),
    AlertFrequency.DAILY_AM: timedelta(hours=24),
    AlertFrequency.DAILY_PM: timedelta(hours=24),
    AlertFrequency.WEEKLY: timedelta(days=7),
}


def recency_cutoff(frequency: AlertFrequency | str, now: datetime) -> datetime:
    """Return the creation-time lower bound for postings in a digest.

    Example:
        >>> recency_cutoff("weekly", datetime(2025, 11, 10, 9, tzinfo=timezone.utc))
        datetime.datetime(2025, 11, 3, 9, 0, tzinfo=datetime.timezone.utc)
    """
    return ensure_utc(now) - RECENCY_WINDOWS[AlertFrequency(frequency)]


def build_conditions(alert: JobAlert, cutoff: datetime) -> List[ColumnElement[bool]]:
    """Translate an alert into SQL predicates on the jobs table.

    Filters that are unset on the alert are omitted. A salary bound of 0 is
    treated as unset.
    """
    conditions: List[ColumnElement[bool]] = []

    if alert.keywords:
        conditions.append(
            or_(
                *(
                    predicate
                    for keyword in alert.keywords
                    for predicate in (
                        contains_ci(JobModel.title, keyword),
                        contains_ci(JobModel.description, keyword),
                    )
                )
            )
        )

    if alert.location:
        conditions.append(contains_ci(JobModel.location, alert.location))

    if alert.employment_types:
        conditions.append(JobModel.employment_type.in_(list(alert.employment_types)))

    if alert.job_levels:
        conditions.append(JobModel.job_level.in_(list(alert.job_levels)))

    if alert.salary_min:
        conditions.append(JobModel.salary_min >= alert.salary_min)

    if alert.salary_max:
        conditions.append(JobModel.salary_max <= alert.salary_max)

    conditions.append(JobModel.created_at > to_storage(cutoff))

    return conditions


class JobMatcher:
    """Evaluates alerts against the active postings in the backend store."""

    def __init__(self, session: Session, logger_instance: Optional[logging.Logger] = None):
        """
        Args:
            session: SQLAlchemy session used for the queries
            logger_instance: Optional logger (defaults to module logger)
        """
        self.jobs = JobRepository(session)
        self.logger = logger_instance or logger

    def find_matches(self, alert: JobAlert, now: datetime) -> List[JobPosting]:
        """Return active postings matching the alert, newest first.

        Raises:
            PersistenceError: If the query fails
        """
        cutoff = recency_cutoff(alert.frequency, now)
        matches = self.jobs.find_active(build_conditions(alert, cutoff))

        if matches:
            self.logger.info(
                f"Alert {alert.id} matched {len(matches)} job(s)",
                extra={
                    "event": "alert.match.found",
                    "alert_id": alert.id,
                    "match_count": len(matches),
                    "cutoff": to_storage(cutoff),
                },
            )
        else:
            self.logger.debug(
                f"Alert {alert.id} had no matches",
                extra={
                    "event": "alert.match.none",
                    "alert_id": alert.id,
                    "cutoff": to_storage(cutoff),
                },
            )

        return matches
