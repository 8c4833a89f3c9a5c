"""Next expected processing time for an alert after a digest was sent."""

from datetime import datetime, timedelta
from typing import Optional

from job_alerts.config.models import ScheduleConfig
from job_alerts.domain.models import AlertFrequency
from job_alerts.utils.timestamps import ensure_utc


def compute_next(
    frequency: AlertFrequency | str,
    now: datetime,
    schedule: Optional[ScheduleConfig] = None,
) -> datetime:
    """
    Compute ``next_scheduled_at`` for an alert.

    Rules, evaluated in the schedule timezone:
    - daily_am: next calendar day at the AM slot hour
    - daily_pm: next calendar day at the PM slot hour
    - weekly: the next weekly weekday at the weekly hour, always in the future
      by at least one day (sending on a Monday schedules the following Monday)
    - instant: exactly one hour after ``now``

    Args:
        frequency: Alert cadence
        now: Timezone-aware (or naive UTC) current time
        schedule: Slot configuration

    Returns:
        Timezone-aware UTC datetime

    Example:
        >>> compute_next("daily_am", datetime(2025, 11, 4, 8, 3, tzinfo=timezone.utc))
        datetime.datetime(2025, 11, 5, 8, 0, tzinfo=datetime.timezone.utc)
    """
    schedule = schedule or ScheduleConfig()
    frequency = AlertFrequency(frequency)
    now_utc = ensure_utc(now)

    if frequency == AlertFrequency.INSTANT:
        return now_utc + timedelta(hours=1)

    local = now_utc.astimezone(schedule.tzinfo())

    if frequency == AlertFrequency.WEEKLY:
        days_ahead = (schedule.weekly_weekday - local.weekday()) % 7
        if days_ahead <= 0:
            days_ahead += 7
        hour = schedule.weekly_hour
    else:
        days_ahead = 1
        if frequency == AlertFrequency.DAILY_AM:
            hour = schedule.daily_am_hour
        else:
            hour = schedule.daily_pm_hour

    target_date = local.date() + timedelta(days=days_ahead)
    target = datetime(
        target_date.year,
        target_date.month,
        target_date.day,
        hour,
        tzinfo=schedule.tzinfo(),
    )
    return ensure_utc(target)
