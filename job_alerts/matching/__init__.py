"""Alert matching against active job postings.

This module provides:
- JobMatcher: runs an alert's criteria against the jobs table
- build_conditions: the SQL predicates for one alert
- recency_cutoff: how far back each frequency looks
"""

from .matcher import RECENCY_WINDOWS, JobMatcher, build_conditions, recency_cutoff

__all__ = [
    "JobMatcher",
    "build_conditions",
    "recency_cutoff",
    "RECENCY_WINDOWS",
]
