"""Persistence layer for the job board's backend store.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - AlertRepository: active alert fetch and schedule updates
    - JobRepository: posting queries, recency counts and search
    - CompanyRepository, ProfileRepository: seeding and lookups

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from job_alerts.persistence import init_database, get_session, AlertRepository
    >>>
    >>> init_database("sqlite:///./data/job_alerts.db")
    >>>
    >>> with get_session() as session:
    ...     alerts = AlertRepository(session).get_active_alerts("daily_am")
"""

# Database initialization and session management
from .database import close_database, get_engine, get_session, init_database

# Repository classes
from .repositories import AlertRepository, CompanyRepository, JobRepository, ProfileRepository

# Exceptions
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "AlertRepository",
    "JobRepository",
    "CompanyRepository",
    "ProfileRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
