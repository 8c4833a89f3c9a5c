"""Alert run orchestration: fetch due alerts, match, send digests, reschedule."""

from .models import AlertFailure, AlertRunResult
from .runner import AlertRunner

__all__ = ["AlertRunner", "AlertRunResult", "AlertFailure"]
