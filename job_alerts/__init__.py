"""Scheduled job-alert matching and digest notification worker."""

__version__ = "1.0.0"
