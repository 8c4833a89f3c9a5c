"""Persistence layer exceptions.

Every database failure surfaces as a PersistenceError subclass so the runner
can isolate it to the bucket or alert being processed.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialised or reached.

    Examples:
    - Invalid database URL
    - Database file not accessible
    - get_session() called before init_database()
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an update targets a row that no longer exists.

    Alerts may be deleted by their owner between fetch and schedule update;
    this is how that case is reported.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (duplicate keys, missing foreign keys)."""

    pass
