"""Reusable SQL filter expressions."""

from sqlalchemy import ColumnElement
from sqlalchemy.orm import InstrumentedAttribute

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally.

    Example:
        >>> escape_like("100%_remote")
        '100\\\\%\\\\_remote'
    """
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_ci(column: InstrumentedAttribute, term: str) -> ColumnElement[bool]:
    """Case-insensitive substring match of ``term`` in ``column``."""
    return column.ilike(f"%{escape_like(term)}%", escape=LIKE_ESCAPE)
