"""Data models for alert run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class AlertFailure:
    """
    One isolated failure inside a run.

    Attributes:
        stage: Where it failed: fetch (whole bucket), match, send or update
        bucket: Schedule bucket being processed
        alert_id: Affected alert, None for bucket-level failures
        error: Error message
    """

    stage: str
    bucket: str
    alert_id: Optional[str]
    error: str


@dataclass
class AlertRunResult:
    """
    Aggregate results from one pass over the due alerts.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        due_buckets: Buckets that were due (in processing order)
        processed: Alerts considered, including ones without an email address
        matched_alerts: Alerts with at least one matching posting
        emails_sent: Digests accepted by the email provider
        schedules_updated: Alerts whose last/next timestamps were written
        skipped_no_email: Alerts skipped because the owner has no email
        failures: Isolated failures, in the order they occurred
        had_errors: Whether any failure was recorded
        skipped: Whether the run was skipped (previous run still in progress)
        total_duration_seconds: Wall-clock duration of the run
    """

    run_started_at: datetime
    run_finished_at: datetime
    due_buckets: List[str] = field(default_factory=list)
    processed: int = 0
    matched_alerts: int = 0
    emails_sent: int = 0
    schedules_updated: int = 0
    skipped_no_email: int = 0
    failures: List[AlertFailure] = field(default_factory=list)
    had_errors: bool = False
    skipped: bool = False
    total_duration_seconds: float = 0.0

    def __post_init__(self):
        if self.failures:
            self.had_errors = True

        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()

    def to_response(self) -> Dict[str, Any]:
        """Body returned by the HTTP trigger on success."""
        return {"success": True, "processed": self.processed}
