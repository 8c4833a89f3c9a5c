"""Domain models for the job alert worker."""

from .models import (
    AlertFrequency,
    Company,
    EmploymentType,
    JobAlert,
    JobLevel,
    JobPosting,
    JobStatus,
    OnsiteType,
    Profile,
    UserRole,
)

__all__ = [
    "AlertFrequency",
    "Company",
    "EmploymentType",
    "JobAlert",
    "JobLevel",
    "JobPosting",
    "JobStatus",
    "OnsiteType",
    "Profile",
    "UserRole",
]
