"""Template context for digest emails.

Turns an alert and its matched postings into the plain dictionary the
Jinja2 templates consume.
"""

from typing import Dict, List, Optional, Sequence

from job_alerts.config.models import LinksConfig
from job_alerts.domain.models import JobAlert, JobPosting

DEFAULT_GREETING_NAME = "there"
DEFAULT_COMPANY_NAME = "Company"


def format_salary_range(posting: JobPosting) -> Optional[str]:
    """Format the salary as ``$min-$max`` with thousands separators.

    Returns None unless both bounds are known.

    Example:
        >>> format_salary_range(posting)  # salary_min=50000, salary_max=90000
        '$50,000-$90,000'
    """
    salary = posting.salary_range()
    if salary is None:
        return None
    low, high = salary
    return f"${low:,}-${high:,}"


def _label(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.replace("_", " ").capitalize()


def build_job_entry(posting: JobPosting, links: LinksConfig) -> Dict:
    """Context for one posting inside the digest."""
    company_name = posting.company.name if posting.company and posting.company.name else None

    return {
        "id": posting.id,
        "title": posting.title,
        "company": company_name or DEFAULT_COMPANY_NAME,
        "location": posting.location,
        "onsite_type": _label(posting.onsite_type),
        "job_level": _label(posting.job_level),
        "employment_type": _label(posting.employment_type),
        "salary": format_salary_range(posting),
        "view_url": links.view_job_url(posting.id),
        "apply_url": links.apply_url(posting.id),
    }


def build_digest_context(
    alert: JobAlert,
    postings: Sequence[JobPosting],
    links: LinksConfig,
) -> Dict:
    """Build the template context for one digest.

    Args:
        alert: Alert being notified (with joined user_name)
        postings: Matched postings, in display order
        links: URL settings for the job board

    Returns:
        Dictionary with keys:
        - alert_id, greeting_name
        - match_count, job_noun ("job" or "jobs")
        - alert_terms: keywords joined with ", " or "All jobs"
        - alert_location: location filter or None
        - alert_description: alert_terms and location in one phrase
        - jobs: list of per-posting entries (see build_job_entry)
        - manage_alerts_url
    """
    match_count = len(postings)
    jobs: List[Dict] = [build_job_entry(posting, links) for posting in postings]

    return {
        "alert_id": alert.id,
        "greeting_name": alert.user_name or DEFAULT_GREETING_NAME,
        "match_count": match_count,
        "job_noun": "job" if match_count == 1 else "jobs",
        "alert_terms": ", ".join(alert.keywords) if alert.keywords else "All jobs",
        "alert_location": alert.location,
        "alert_description": alert.describe(),
        "jobs": jobs,
        "manage_alerts_url": links.manage_alerts_url(),
    }
