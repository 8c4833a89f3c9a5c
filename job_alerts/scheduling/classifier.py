"""Decide which alert frequencies are due at a given wall-clock time."""

from datetime import datetime
from typing import Optional, Set

from job_alerts.config.models import ScheduleConfig
from job_alerts.domain.models import AlertFrequency


def due_buckets(now: datetime, schedule: Optional[ScheduleConfig] = None) -> Set[AlertFrequency]:
    """
    Return the schedule buckets due at ``now``.

    Only the hour (and weekday, for weekly) is inspected, so any minute inside
    a slot hour qualifies. ``instant`` is always included; whether instant
    alerts are actually processed depends on recent postings, which the
    runner checks separately.

    Args:
        now: Current time, already expressed in the schedule timezone
        schedule: Slot configuration (defaults: 08:00, 17:00, Monday 09:00)

    Returns:
        Set of due AlertFrequency values

    Example:
        >>> due_buckets(datetime(2025, 11, 3, 9, 0))  # a Monday
        {<AlertFrequency.WEEKLY: 'weekly'>, <AlertFrequency.INSTANT: 'instant'>}
    """
    schedule = schedule or ScheduleConfig()
    buckets = {AlertFrequency.INSTANT}

    if now.hour == schedule.daily_am_hour:
        buckets.add(AlertFrequency.DAILY_AM)
    if now.hour == schedule.daily_pm_hour:
        buckets.add(AlertFrequency.DAILY_PM)
    if now.weekday() == schedule.weekly_weekday and now.hour == schedule.weekly_hour:
        buckets.add(AlertFrequency.WEEKLY)

    return buckets
