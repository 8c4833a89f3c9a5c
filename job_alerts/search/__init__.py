"""Job listing search: filters, result pages and spelling suggestions."""

from .models import SALARY_CEILING, SALARY_FLOOR, JobSearchFilters, SearchPage, SortOrder
from .spelling import CORRECTIONS, suggest_correction

__all__ = [
    "JobSearchFilters",
    "SearchPage",
    "SortOrder",
    "SALARY_FLOOR",
    "SALARY_CEILING",
    "CORRECTIONS",
    "suggest_correction",
]
