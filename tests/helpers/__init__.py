"""Test helper utilities for job alert worker tests."""

from .factories import (
    FIXED_NOW,
    RecordingSender,
    make_alert,
    make_company,
    make_job,
    make_profile,
    seed,
)

__all__ = [
    "FIXED_NOW",
    "RecordingSender",
    "make_alert",
    "make_company",
    "make_job",
    "make_profile",
    "seed",
]
