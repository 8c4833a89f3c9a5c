"""Database schema definition and ORM models.

The tables mirror the job board's backend store: ``profiles``, ``companies``,
``jobs`` and ``job_alerts``. Timestamps are stored as fixed-width ISO 8601
UTC strings so range filters can compare them as text.
"""

import logging
from typing import Optional

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from job_alerts.domain.models import Company, JobAlert, JobPosting, Profile
from job_alerts.utils.timestamps import from_storage, to_storage

logger = logging.getLogger(__name__)

Base = declarative_base()


class ProfileModel(Base):
    """ORM model for the profiles table (user contact identity)."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True, nullable=False)
    email = Column(String(320), nullable=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="job_seeker")

    def to_domain(self) -> Profile:
        return Profile(id=self.id, email=self.email, name=self.name, role=self.role)

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileModel":
        return cls(id=profile.id, email=profile.email, name=profile.name, role=profile.role)


class CompanyModel(Base):
    """ORM model for the companies table."""

    __tablename__ = "companies"

    id = Column(String(64), primary_key=True, nullable=False)
    name = Column(String(255), nullable=False)
    industry = Column(String(255), nullable=True)
    logo_url = Column(Text, nullable=True)

    def to_domain(self) -> Company:
        return Company(
            id=self.id,
            name=self.name,
            industry=self.industry,
            logo_url=self.logo_url,
        )

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyModel":
        return cls(
            id=company.id,
            name=company.name,
            industry=company.industry,
            logo_url=company.logo_url,
        )


class JobModel(Base):
    """ORM model for the jobs table (employer postings)."""

    __tablename__ = "jobs"

    id = Column(String(64), primary_key=True, nullable=False)
    company_id = Column(String(64), ForeignKey("companies.id"), nullable=True)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(255), nullable=True)
    employment_type = Column(String(20), nullable=True)
    onsite_type = Column(String(20), nullable=True)
    job_level = Column(String(20), nullable=True)
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="active")

    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_jobs_status_created", "status", "created_at"),
        Index("idx_jobs_company", "company_id"),
    )

    def to_domain(self, company: Optional["CompanyModel"] = None) -> JobPosting:
        """Convert to a JobPosting, attaching the joined company if given."""
        return JobPosting(
            id=self.id,
            company_id=self.company_id,
            title=self.title,
            description=self.description or "",
            location=self.location,
            employment_type=self.employment_type,
            onsite_type=self.onsite_type,
            job_level=self.job_level,
            salary_min=self.salary_min,
            salary_max=self.salary_max,
            status=self.status,
            created_at=from_storage(self.created_at),
            updated_at=from_storage(self.updated_at),
            company=company.to_domain() if company is not None else None,
        )

    @classmethod
    def from_domain(cls, job: JobPosting) -> "JobModel":
        return cls(
            id=job.id,
            company_id=job.company_id,
            title=job.title,
            description=job.description,
            location=job.location,
            employment_type=job.employment_type,
            onsite_type=job.onsite_type,
            job_level=job.job_level,
            salary_min=job.salary_min,
            salary_max=job.salary_max,
            status=job.status,
            created_at=to_storage(job.created_at),
            updated_at=to_storage(job.updated_at),
        )


class JobAlertModel(Base):
    """ORM model for the job_alerts table.

    ``user_id`` is not a foreign key to profiles. The identity
    provider owns users, and a profile row can be missing.
    """

    __tablename__ = "job_alerts"

    id = Column(String(64), primary_key=True, nullable=False)
    user_id = Column(String(64), nullable=False)

    keywords = Column(JSON, nullable=False, default=list)
    location = Column(String(255), nullable=True)
    employment_types = Column(JSON, nullable=True)
    job_levels = Column(JSON, nullable=True)
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)

    frequency = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(String(50), nullable=False)
    last_triggered_at = Column(String(50), nullable=True)
    next_scheduled_at = Column(String(50), nullable=True)

    __table_args__ = (
        Index("idx_job_alerts_frequency_active", "frequency", "is_active"),
        Index("idx_job_alerts_user", "user_id"),
    )

    def to_domain(self, profile: Optional[ProfileModel] = None) -> JobAlert:
        """Convert to a JobAlert, filling owner email/name from the joined profile."""
        return JobAlert(
            id=self.id,
            user_id=self.user_id,
            keywords=self.keywords or [],
            location=self.location,
            employment_types=self.employment_types,
            job_levels=self.job_levels,
            salary_min=self.salary_min,
            salary_max=self.salary_max,
            frequency=self.frequency,
            is_active=self.is_active,
            created_at=from_storage(self.created_at),
            last_triggered_at=from_storage(self.last_triggered_at),
            next_scheduled_at=from_storage(self.next_scheduled_at),
            user_email=profile.email if profile is not None else None,
            user_name=profile.name if profile is not None else None,
        )

    @classmethod
    def from_domain(cls, alert: JobAlert) -> "JobAlertModel":
        return cls(
            id=alert.id,
            user_id=alert.user_id,
            keywords=list(alert.keywords),
            location=alert.location,
            employment_types=list(alert.employment_types) if alert.employment_types else None,
            job_levels=list(alert.job_levels) if alert.job_levels else None,
            salary_min=alert.salary_min,
            salary_max=alert.salary_max,
            frequency=alert.frequency,
            is_active=alert.is_active,
            created_at=to_storage(alert.created_at),
            last_triggered_at=to_storage(alert.last_triggered_at),
            next_scheduled_at=to_storage(alert.next_scheduled_at),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that don't exist yet (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
