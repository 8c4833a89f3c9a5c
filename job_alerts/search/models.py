"""Search filters and result pages for the job listing search."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from job_alerts.domain.models import JobPosting

SALARY_FLOOR = 0
SALARY_CEILING = 250000


class SortOrder(str, Enum):
    """Result ordering. Both orders are newest/highest first."""

    DATE = "date"
    SALARY = "salary"


@dataclass
class JobSearchFilters:
    """
    Facet filters applied on top of the free-text query.

    Attributes:
        employment_types: Accepted employment types (empty = any)
        job_levels: Accepted job levels (empty = any)
        onsite_types: Accepted onsite types (empty = any)
        salary_range: (low, high); the low bound applies only above
            SALARY_FLOOR and the high bound only below SALARY_CEILING
    """

    employment_types: List[str] = field(default_factory=list)
    job_levels: List[str] = field(default_factory=list)
    onsite_types: List[str] = field(default_factory=list)
    salary_range: Tuple[int, int] = (SALARY_FLOOR, SALARY_CEILING)

    def __post_init__(self):
        low, high = self.salary_range
        if low < SALARY_FLOOR or high < low:
            raise ValueError(f"Invalid salary range: {self.salary_range}")


@dataclass
class SearchPage:
    """One page of search results plus the total number of matches."""

    jobs: List[JobPosting]
    total_count: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total_count + self.per_page - 1) // self.per_page

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
