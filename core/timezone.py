"""
Timezone helpers for the expiry job.
"""

from datetime import date, datetime

import pytz


def get_timezone(tz_name: str):
    """Resolve a timezone name, falling back to UTC for unknown names."""
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def today_in_timezone(tz_name: str, now: datetime | None = None) -> date:
    """
    Get the current calendar date in a timezone.

    Args:
        tz_name: Timezone string (e.g., "Asia/Kolkata"); unknown names use UTC
        now: Reference instant (naive datetimes treated as UTC). Defaults to now.

    Returns:
        The local calendar date at that instant
    """
    if now is None:
        now = datetime.now(pytz.UTC)
    elif now.tzinfo is None:
        now = pytz.UTC.localize(now)

    return now.astimezone(get_timezone(tz_name)).date()
