"""Data access layer (repositories) for persistence operations.

Repositories wrap a SQLAlchemy session, run the queries the worker and API
need, and hand back domain models rather than ORM rows.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import ColumnElement, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from job_alerts.domain.models import (
    AlertFrequency,
    Company,
    JobAlert,
    JobPosting,
    JobStatus,
    Profile,
)
from job_alerts.search.models import (
    SALARY_CEILING,
    SALARY_FLOOR,
    JobSearchFilters,
    SearchPage,
    SortOrder,
)
from job_alerts.utils.timestamps import to_storage

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .filters import contains_ci
from .schema import CompanyModel, JobAlertModel, JobModel, ProfileModel

logger = logging.getLogger(__name__)


class AlertRepository:
    """Repository for job alert records."""

    def __init__(self, session: Session):
        self.session = session

    def get_active_alerts(self, frequency: AlertFrequency | str) -> List[JobAlert]:
        """Fetch every active alert with the given frequency.

        The owner's profile is outer-joined so that alerts whose profile is
        missing are still returned, with ``user_email`` left as None.

        Args:
            frequency: Alert cadence / schedule bucket

        Returns:
            List of JobAlert domain models, oldest alert first

        Raises:
            PersistenceError: If database error occurs
        """
        frequency_value = AlertFrequency(frequency).value
        try:
            stmt = (
                select(JobAlertModel, ProfileModel)
                .outerjoin(ProfileModel, ProfileModel.id == JobAlertModel.user_id)
                .where(
                    JobAlertModel.frequency == frequency_value,
                    JobAlertModel.is_active.is_(True),
                )
                .order_by(JobAlertModel.created_at.asc())
            )
            rows = self.session.execute(stmt).all()
            return [alert_model.to_domain(profile) for alert_model, profile in rows]

        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving active {frequency_value} alerts: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to retrieve alerts: {e}") from e

    def get_by_id(self, alert_id: str) -> Optional[JobAlert]:
        """Retrieve one alert (with profile fields) or None."""
        try:
            stmt = (
                select(JobAlertModel, ProfileModel)
                .outerjoin(ProfileModel, ProfileModel.id == JobAlertModel.user_id)
                .where(JobAlertModel.id == alert_id)
            )
            row = self.session.execute(stmt).one_or_none()
            if row is None:
                return None
            alert_model, profile = row
            return alert_model.to_domain(profile)

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve alert: {e}") from e

    def add(self, alert: JobAlert) -> JobAlert:
        """Insert a new alert.

        Raises:
            DataIntegrityError: If an alert with the same id exists
            PersistenceError: If database error occurs
        """
        try:
            alert_model = JobAlertModel.from_domain(alert)
            self.session.add(alert_model)
            self.session.flush()
            return alert_model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error inserting alert {alert.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert alert: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting alert {alert.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert alert: {e}") from e

    def mark_triggered(
        self,
        alert_id: str,
        triggered_at: datetime,
        next_scheduled_at: datetime,
    ) -> None:
        """Record a successful digest and the next expected processing time.

        Args:
            alert_id: Alert identifier
            triggered_at: When the digest was sent (UTC)
            next_scheduled_at: Next processing time (UTC)

        Raises:
            RecordNotFoundError: If alert_id doesn't exist
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                update(JobAlertModel)
                .where(JobAlertModel.id == alert_id)
                .values(
                    last_triggered_at=to_storage(triggered_at),
                    next_scheduled_at=to_storage(next_scheduled_at),
                )
            )
            result = self.session.execute(stmt)
            self.session.flush()

            if result.rowcount == 0:
                raise RecordNotFoundError(f"Alert with id {alert_id} not found")

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating schedule for alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update alert schedule: {e}") from e


class JobRepository:
    """Repository for job postings."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, job: JobPosting) -> JobPosting:
        """Insert a posting.

        Raises:
            DataIntegrityError: On duplicate id or unknown company
            PersistenceError: If database error occurs
        """
        try:
            job_model = JobModel.from_domain(job)
            self.session.add(job_model)
            self.session.flush()
            return job_model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error inserting job {job.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert job: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting job {job.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert job: {e}") from e

    def get_by_id(self, job_id: str) -> Optional[JobPosting]:
        try:
            stmt = (
                select(JobModel, CompanyModel)
                .outerjoin(CompanyModel, CompanyModel.id == JobModel.company_id)
                .where(JobModel.id == job_id)
            )
            row = self.session.execute(stmt).one_or_none()
            if row is None:
                return None
            job_model, company = row
            return job_model.to_domain(company)

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving job {job_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve job: {e}") from e

    def find_active(
        self,
        conditions: Iterable[ColumnElement[bool]] = (),
        limit: Optional[int] = None,
    ) -> List[JobPosting]:
        """Return active postings satisfying all ``conditions``, newest first.

        Each posting comes back with its company attached.

        Args:
            conditions: Extra SQL predicates on JobModel columns
            limit: Optional maximum number of rows

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(JobModel, CompanyModel)
                .outerjoin(CompanyModel, CompanyModel.id == JobModel.company_id)
                .where(JobModel.status == JobStatus.ACTIVE.value, *conditions)
                .order_by(JobModel.created_at.desc(), JobModel.id.asc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)

            rows = self.session.execute(stmt).all()
            return [job_model.to_domain(company) for job_model, company in rows]

        except SQLAlchemyError as e:
            logger.error(f"Error querying active jobs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to query jobs: {e}") from e

    def count_created_since(self, cutoff: datetime) -> int:
        """Count active postings created strictly after ``cutoff``."""
        try:
            stmt = select(func.count()).select_from(JobModel).where(
                JobModel.status == JobStatus.ACTIVE.value,
                JobModel.created_at > to_storage(cutoff),
            )
            return int(self.session.execute(stmt).scalar_one())

        except SQLAlchemyError as e:
            logger.error(f"Error counting recent jobs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count recent jobs: {e}") from e

    def search(
        self,
        query: str = "",
        filters: Optional[JobSearchFilters] = None,
        page: int = 1,
        per_page: int = 10,
        sort: SortOrder | str = SortOrder.DATE,
    ) -> SearchPage:
        """Full-text-ish search over active postings with offset pagination.

        ``query`` is matched case-insensitively against title, description
        and location (any of them). Facet filters are AND-ed.

        Args:
            query: Free text, blank means everything
            filters: Facet filters
            page: 1-based page number
            per_page: Page size
            sort: ``date`` (newest first) or ``salary`` (highest max first)

        Raises:
            ValueError: If page or per_page is not positive
            PersistenceError: If database error occurs
        """
        if page < 1 or per_page < 1:
            raise ValueError("page and per_page must be positive")

        filters = filters or JobSearchFilters()
        sort = SortOrder(sort)

        conditions: List[ColumnElement[bool]] = [JobModel.status == JobStatus.ACTIVE.value]

        term = (query or "").strip()
        if term:
            conditions.append(
                or_(
                    contains_ci(JobModel.title, term),
                    contains_ci(JobModel.description, term),
                    contains_ci(JobModel.location, term),
                )
            )
        if filters.employment_types:
            conditions.append(JobModel.employment_type.in_(filters.employment_types))
        if filters.job_levels:
            conditions.append(JobModel.job_level.in_(filters.job_levels))
        if filters.onsite_types:
            conditions.append(JobModel.onsite_type.in_(filters.onsite_types))

        low, high = filters.salary_range
        if low > SALARY_FLOOR:
            conditions.append(JobModel.salary_min >= low)
        if high < SALARY_CEILING:
            conditions.append(JobModel.salary_max <= high)

        if sort == SortOrder.SALARY:
            order = (JobModel.salary_max.desc().nulls_last(), JobModel.created_at.desc())
        else:
            order = (JobModel.created_at.desc(), JobModel.id.asc())

        try:
            count_stmt = select(func.count()).select_from(JobModel).where(*conditions)
            total = int(self.session.execute(count_stmt).scalar_one())

            stmt = (
                select(JobModel, CompanyModel)
                .outerjoin(CompanyModel, CompanyModel.id == JobModel.company_id)
                .where(*conditions)
                .order_by(*order)
                .offset((page - 1) * per_page)
                .limit(per_page)
            )
            rows = self.session.execute(stmt).all()

        except SQLAlchemyError as e:
            logger.error(f"Error searching jobs for '{term}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to search jobs: {e}") from e

        return SearchPage(
            jobs=[job_model.to_domain(company) for job_model, company in rows],
            total_count=total,
            page=page,
            per_page=per_page,
        )


class CompanyRepository:
    """Repository for employer records."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, company: Company) -> Company:
        try:
            company_model = CompanyModel.from_domain(company)
            self.session.add(company_model)
            self.session.flush()
            return company_model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error inserting company {company.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert company: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting company {company.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert company: {e}") from e


class ProfileRepository:
    """Repository for user profiles."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, profile: Profile) -> Profile:
        try:
            profile_model = ProfileModel.from_domain(profile)
            self.session.add(profile_model)
            self.session.flush()
            return profile_model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error inserting profile {profile.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert profile: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting profile {profile.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert profile: {e}") from e

    def get_by_email(self, email: str) -> Optional[Profile]:
        """Case-insensitive lookup by email address."""
        try:
            stmt = select(ProfileModel).where(func.lower(ProfileModel.email) == email.lower())
            profile_model = self.session.execute(stmt).scalars().first()
            return profile_model.to_domain() if profile_model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving profile by email: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve profile: {e}") from e
