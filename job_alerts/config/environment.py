"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/job_alerts.db"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnvironmentConfig:
    """Secrets and deployment settings read from the environment."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        app_base_url: Optional[str] = None,
        resend_api_key: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.app_base_url = app_base_url
        self.resend_api_key = resend_api_key
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.log_level = log_level
        self.environment = environment or "local"


def load_environment_config(email_provider: str = "resend") -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Always read:
    - DATABASE_URL: SQLAlchemy URL of the backend store (default: local SQLite file)
    - APP_BASE_URL: Public job board URL used in email links (optional)
    - LOG_LEVEL: Override log level (optional)
    - ENVIRONMENT: Environment label attached to log records (optional)

    Provider credentials:
    - resend: RESEND_API_KEY (required)
    - smtp: SMTP_HOST and SMTP_PORT (required), SMTP_USER/SMTP_PASS (both or neither)

    Args:
        email_provider: Configured email provider name

    Returns:
        EnvironmentConfig with validated values

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    errors = []

    database_url = os.getenv("DATABASE_URL")
    app_base_url = os.getenv("APP_BASE_URL")
    log_level = os.getenv("LOG_LEVEL")
    environment = os.getenv("ENVIRONMENT")
    resend_api_key = os.getenv("RESEND_API_KEY")
    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")
    smtp_user = os.getenv("SMTP_USER")
    smtp_pass = os.getenv("SMTP_PASS")

    if email_provider == "resend":
        if not resend_api_key:
            errors.append("Missing required environment variable: RESEND_API_KEY")
    elif email_provider == "smtp":
        if not smtp_host:
            errors.append("Missing required environment variable: SMTP_HOST")
        if not smtp_port_str:
            errors.append("Missing required environment variable: SMTP_PORT")
        if smtp_user and not smtp_pass:
            errors.append(
                "SMTP_USER is set but SMTP_PASS is not. Both must be set for authentication."
            )
        elif smtp_pass and not smtp_user:
            errors.append(
                "SMTP_PASS is set but SMTP_USER is not. Both must be set for authentication."
            )
    else:
        errors.append(f"Unsupported email provider: '{email_provider}'")

    smtp_port = None
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if smtp_port < 1 or smtp_port > 65535:
                errors.append(f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535.")
        except ValueError:
            errors.append(f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer.")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if app_base_url and not app_base_url.startswith(("http://", "https://")):
        errors.append(f"Invalid APP_BASE_URL: '{app_base_url}'. Must start with http(s)://")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Set RESEND_API_KEY, or switch email.provider to smtp and set SMTP_*",
            ],
        )

    return EnvironmentConfig(
        database_url=database_url,
        app_base_url=app_base_url,
        resend_api_key=resend_api_key,
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        log_level=log_level.upper() if log_level else None,
        environment=environment,
    )
