"""Hourly scheduling of alert runs for daemon mode."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
