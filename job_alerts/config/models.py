"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator


class EmailProvider(str, Enum):
    """Supported email delivery providers."""

    RESEND = "resend"
    SMTP = "smtp"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ScheduleConfig(BaseModel):
    """Clock slots at which each alert frequency becomes due."""

    timezone: str = Field("UTC", description="IANA timezone the clock slots are evaluated in")
    daily_am_hour: int = Field(8, ge=0, le=23, description="Hour daily_am alerts are due")
    daily_pm_hour: int = Field(17, ge=0, le=23, description="Hour daily_pm alerts are due")
    weekly_weekday: int = Field(
        0, ge=0, le=6, description="Weekday weekly alerts are due (0 = Monday)"
    )
    weekly_hour: int = Field(9, ge=0, le=23, description="Hour weekly alerts are due")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the zoneinfo database does not know."""
        name = v.strip()
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return name

    @model_validator(mode="after")
    def validate_distinct_daily_slots(self):
        if self.daily_am_hour == self.daily_pm_hour:
            raise ValueError("daily_am_hour and daily_pm_hour must differ")
        return self

    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class LinksConfig(BaseModel):
    """URL templates used for the links inside digest emails."""

    base_url: str = Field(
        "http://localhost:8080", min_length=1, description="Public job board URL"
    )
    view_job_path: str = Field("/jobs/{job_id}", description="Path template for 'View Job'")
    apply_path: str = Field("/apply/{job_id}", description="Path template for 'Apply Now'")
    manage_alerts_path: str = Field(
        "/profile/alerts", description="Path of the alert management page"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped:
            raise ValueError("base_url cannot be empty")
        return stripped

    @field_validator("view_job_path", "apply_path")
    @classmethod
    def require_job_placeholder(cls, v: str) -> str:
        if "{job_id}" not in v:
            raise ValueError("Path template must contain the {job_id} placeholder")
        try:
            v.format(job_id="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Path template may only use the {{job_id}} placeholder: {v}") from e
        return v

    def view_job_url(self, job_id: str) -> str:
        return self.base_url + self.view_job_path.format(job_id=job_id)

    def apply_url(self, job_id: str) -> str:
        return self.base_url + self.apply_path.format(job_id=job_id)

    def manage_alerts_url(self) -> str:
        return self.base_url + self.manage_alerts_path


class EmailConfig(BaseModel):
    """Email delivery settings."""

    provider: EmailProvider = Field(EmailProvider.RESEND, description="Delivery provider")
    sender: str = Field(
        "TalentHub <no-reply@talenthub.com>",
        min_length=3,
        description="From address for digest emails",
    )
    use_tls: bool = Field(True, description="Use STARTTLS for SMTP connections")
    request_timeout: int = Field(
        30, ge=5, le=300, description="HTTP timeout for API providers (seconds)"
    )
    max_retries: int = Field(
        0, ge=0, le=10, description="Retry attempts for a failed send (0 = send once)"
    )
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier for retries"
    )
    retry_initial_delay: int = Field(5, ge=1, le=60, description="Initial retry delay in seconds")

    model_config = {"use_enum_values": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="Log output format")

    model_config = {"use_enum_values": True}


class ServerConfig(BaseModel):
    """Bind address for the HTTP trigger endpoint."""

    host: str = Field("0.0.0.0", min_length=1)
    port: int = Field(8000, ge=1, le=65535)


class PasswordResetConfig(BaseModel):
    """Rate limit applied to password-reset requests per email address."""

    max_attempts: int = Field(5, ge=1, le=100, description="Attempts allowed per window")
    window_seconds: int = Field(
        3600, ge=60, le=86400, description="Inactivity period after which the counter resets"
    )


class AppConfig(BaseModel):
    """Root configuration object for the job alert worker."""

    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    links: LinksConfig = Field(default_factory=LinksConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    password_reset: PasswordResetConfig = Field(default_factory=PasswordResetConfig)

    def with_base_url(self, base_url: Optional[str]) -> "AppConfig":
        """Return a copy whose links point at ``base_url`` (no-op for None)."""
        if not base_url:
            return self
        links = LinksConfig.model_validate({**self.links.model_dump(), "base_url": base_url})
        return self.model_copy(update={"links": links})
