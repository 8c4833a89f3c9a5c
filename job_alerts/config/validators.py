"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for suspicious values and return warning messages.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    links = config_dict.get("links", {})
    if isinstance(links, dict):
        base_url = links.get("base_url", "")
        if isinstance(base_url, str) and "localhost" in base_url:
            warning_messages.append(
                f"links.base_url points at {base_url}; digest links will not work for recipients"
            )

    email = config_dict.get("email", {})
    if isinstance(email, dict):
        max_retries = email.get("max_retries", 0)
        if isinstance(max_retries, int) and max_retries > 0:
            warning_messages.append(
                f"email.max_retries={max_retries}: a send that timed out after delivery "
                "will be repeated and the recipient may get the digest twice"
            )

    schedule = config_dict.get("schedule", {})
    if isinstance(schedule, dict):
        hours = [schedule.get("daily_am_hour", 8), schedule.get("daily_pm_hour", 17)]
        if schedule.get("weekly_hour", 9) in hours:
            warning_messages.append(
                "weekly_hour coincides with a daily slot; weekly and daily digests "
                "will be sent in the same run"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
