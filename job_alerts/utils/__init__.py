"""Utility helpers for UTC timestamp handling."""

from .timestamps import (
    ensure_utc,
    format_timestamp,
    from_storage,
    parse_iso_datetime,
    to_storage,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "format_timestamp",
    "to_storage",
    "from_storage",
]
