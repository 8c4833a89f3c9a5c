"""Configuration management for the job alert worker."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    AppConfig,
    EmailConfig,
    EmailProvider,
    LinksConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PasswordResetConfig,
    ScheduleConfig,
    ServerConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_app_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "ScheduleConfig",
    "LinksConfig",
    "EmailConfig",
    "LoggingConfig",
    "ServerConfig",
    "PasswordResetConfig",
    "EnvironmentConfig",
    # Enums
    "EmailProvider",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
