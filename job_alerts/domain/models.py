"""Core domain models for alerts, postings, companies and profiles.

This module defines the data structures used throughout the worker:
- JobAlert: a user's saved search with a notification cadence
- JobPosting: an employer listing considered for matching
- Company: the employer a posting belongs to
- Profile: the identity an alert is delivered to
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from job_alerts.utils.timestamps import ensure_utc


class AlertFrequency(str, Enum):
    """Notification cadences. Each value is also a schedule bucket."""

    DAILY_AM = "daily_am"
    DAILY_PM = "daily_pm"
    WEEKLY = "weekly"
    INSTANT = "instant"


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    TEMPORARY = "temporary"
    INTERNSHIP = "internship"
    JOB_SHARE = "job_share"


class JobLevel(str, Enum):
    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    EXECUTIVE = "executive"


class OnsiteType(str, Enum):
    ONSITE = "onsite"
    HYBRID = "hybrid"
    REMOTE = "remote"


class JobStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    CLOSED = "closed"


class UserRole(str, Enum):
    JOB_SEEKER = "job_seeker"
    EMPLOYER = "employer"
    ADMIN = "admin"


class Profile(BaseModel):
    """Contact identity of a registered user."""

    id: str = Field(..., description="User identifier")
    email: Optional[str] = Field(None, description="Email address alerts are sent to")
    name: Optional[str] = Field(None, description="Display name used in greetings")
    role: UserRole = Field(UserRole.JOB_SEEKER, description="Account role")

    model_config = {"use_enum_values": True, "validate_default": True}


class Company(BaseModel):
    """Employer that owns job postings."""

    id: str = Field(..., description="Company identifier")
    name: str = Field(..., description="Company display name")
    industry: Optional[str] = Field(None, description="Industry label")
    logo_url: Optional[str] = Field(None, description="Logo image URL")


class JobPosting(BaseModel):
    """A single employer listing.

    Only postings with status ``active`` are eligible for alert matching and
    search results. ``company`` is populated when the posting was loaded
    together with its employer.
    """

    id: str = Field(..., description="Posting identifier")
    company_id: Optional[str] = Field(None, description="Owning company identifier")
    title: str = Field(..., description="Job title")
    description: str = Field("", description="Full description text")
    location: Optional[str] = Field(None, description="Free-text location")
    employment_type: Optional[EmploymentType] = Field(None, description="Employment type")
    onsite_type: Optional[OnsiteType] = Field(None, description="Onsite, hybrid or remote")
    job_level: Optional[JobLevel] = Field(None, description="Seniority level")
    salary_min: Optional[int] = Field(None, ge=0, description="Lower salary bound")
    salary_max: Optional[int] = Field(None, ge=0, description="Upper salary bound")
    status: JobStatus = Field(JobStatus.ACTIVE, description="Listing status")
    created_at: datetime = Field(..., description="When the posting was created (UTC)")
    updated_at: Optional[datetime] = Field(None, description="Last update (UTC)")
    company: Optional[Company] = Field(None, description="Joined company record")

    model_config = {"use_enum_values": True, "validate_default": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetimes are timezone-aware UTC."""
        return ensure_utc(v)

    def salary_range(self) -> Optional[Tuple[int, int]]:
        """Return (min, max) only when both salary bounds are known."""
        if self.salary_min and self.salary_max:
            return self.salary_min, self.salary_max
        return None


class JobAlert(BaseModel):
    """A standing search saved by a user.

    ``user_email`` and ``user_name`` are joined from the owner's profile when
    the alert is fetched for processing. An alert without a resolvable email
    is still loaded but can never be delivered.
    """

    id: str = Field(..., description="Alert identifier")
    user_id: str = Field(..., description="Owning user identifier")
    keywords: List[str] = Field(default_factory=list, description="OR-ed search keywords")
    location: Optional[str] = Field(None, description="Location substring filter")
    employment_types: Optional[List[EmploymentType]] = Field(
        None, description="Accepted employment types"
    )
    job_levels: Optional[List[JobLevel]] = Field(None, description="Accepted job levels")
    salary_min: Optional[int] = Field(None, ge=0, description="Salary floor")
    salary_max: Optional[int] = Field(None, ge=0, description="Salary ceiling")
    frequency: AlertFrequency = Field(..., description="Notification cadence")
    is_active: bool = Field(True, description="Inactive alerts are never processed")
    created_at: datetime = Field(..., description="When the alert was created (UTC)")
    last_triggered_at: Optional[datetime] = Field(
        None, description="Last successful digest send (UTC)"
    )
    next_scheduled_at: Optional[datetime] = Field(
        None, description="Next expected processing time (UTC)"
    )
    user_email: Optional[str] = Field(None, description="Owner email (joined)")
    user_name: Optional[str] = Field(None, description="Owner display name (joined)")

    model_config = {
        "use_enum_values": True,
        "json_schema_extra": {
            "example": {
                "id": "8a7c0c52-1f1e-4bb6-9a43-6c3d2f0b1e11",
                "user_id": "f2b1c7d0-2a1b-4a39-8f9e-0d7c6b5a4e3f",
                "keywords": ["engineer", "python"],
                "location": "London",
                "employment_types": ["full_time"],
                "job_levels": ["mid", "senior"],
                "salary_min": 50000,
                "salary_max": 90000,
                "frequency": "daily_am",
                "is_active": True,
                "created_at": "2025-11-01T12:00:00Z",
                "last_triggered_at": None,
                "next_scheduled_at": None,
            }
        },
    }

    @field_validator("keywords", mode="before")
    @classmethod
    def clean_keywords(cls, v: Optional[List[str]]) -> List[str]:
        """Strip keywords and drop blanks. None becomes an empty list."""
        if v is None:
            return []
        return [kw.strip() for kw in v if isinstance(kw, str) and kw.strip()]

    @field_validator("location", "user_email", "user_name")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat whitespace-only strings as missing."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    @field_validator("created_at", "last_triggered_at", "next_scheduled_at")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetimes are timezone-aware UTC."""
        return ensure_utc(v)

    def describe(self) -> str:
        """Human-readable summary of what the alert searches for.

        Example:
            >>> alert.describe()
            '"engineer, python" in London'
        """
        terms = ", ".join(self.keywords) if self.keywords else "All jobs"
        if self.location:
            return f'"{terms}" in {self.location}'
        return f'"{terms}"'
