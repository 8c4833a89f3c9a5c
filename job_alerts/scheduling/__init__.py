"""Schedule slots: which buckets are due now, and when an alert runs next."""

from .classifier import due_buckets
from .next_run import compute_next

__all__ = ["due_buckets", "compute_next"]
