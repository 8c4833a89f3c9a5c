"""UTC timestamp helpers.

Every timestamp that crosses a module boundary is a timezone-aware UTC
datetime. The storage format is a fixed-width ISO-8601 string so that string
comparison in SQL orders the same way as the datetimes do.
"""

from datetime import datetime, timezone
from typing import Optional

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Example:
        >>> ensure_utc(datetime(2025, 11, 4, 12, 0)).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string into a UTC datetime.

    Accepts ``Z`` or offset suffixes, naive timestamps (treated as UTC) and
    bare dates. Returns None for empty or unparseable input.

    Example:
        >>> parse_iso_datetime("2025-11-04T12:00:00Z").hour
        12
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    try:
        return ensure_utc(datetime.strptime(iso_string.strip(), "%Y-%m-%d"))
    except ValueError:
        return None


def to_storage(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime in the fixed-width storage format.

    Example:
        >>> to_storage(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000000Z'
    """
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return dt.strftime(STORAGE_FORMAT)


def from_storage(value: Optional[str]) -> Optional[datetime]:
    """Parse a value written by to_storage() (or any ISO 8601 string)."""
    if value is None or value == "":
        return None
    try:
        return datetime.strptime(value, STORAGE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return parse_iso_datetime(value)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as second-precision ISO 8601 UTC with a ``Z`` suffix.

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
