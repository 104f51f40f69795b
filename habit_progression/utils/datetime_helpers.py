"""
Calendar-Day Utilities

Degradation counts whole local calendar days, never elapsed hours:
an activity at 23:59 and a check at 00:01 the next morning are one day
apart. Everything here works on date objects; datetimes are reduced to
their date first.

CRITICAL RULES:
- Never read the clock inside engine code; callers pass the date in
- Convert to the user's timezone before taking .date() (use today_in_timezone())
"""

import logging
from datetime import date, datetime, timedelta
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Default timezone if the caller has none
DEFAULT_TIMEZONE = "UTC"

DateLike = Union[date, datetime]


def to_date(value: DateLike) -> date:
    """
    Reduce a date or datetime to a calendar date

    Args:
        value: date or datetime (aware datetimes keep their own timezone)

    Returns:
        date
    """
    if isinstance(value, datetime):
        return value.date()
    return value


def today_in_timezone(tz_name: str = DEFAULT_TIMEZONE) -> date:
    """
    Get today's date in a timezone

    Args:
        tz_name: IANA timezone name (e.g. "Europe/Berlin")

    Returns:
        Today's date in that timezone
    """
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid timezone '{tz_name}': {e}")
        tz = ZoneInfo(DEFAULT_TIMEZONE)
    return datetime.now(tz).date()


def days_between(start: DateLike, end: DateLike) -> int:
    """
    Whole calendar days from start to end

    Returns:
        Day count, 0 if end is not after start
    """
    return max((to_date(end) - to_date(start)).days, 0)


def is_weekend(day: date) -> bool:
    """Saturday or Sunday"""
    return day.weekday() >= 5


def weekdays_between(start: DateLike, end: DateLike) -> int:
    """
    Weekdays after start up to and including end

    Saturdays and Sundays are skipped, so a Friday -> Monday gap is 1.

    Returns:
        Weekday count, 0 if end is not after start
    """
    start_day = to_date(start)
    end_day = to_date(end)
    if end_day <= start_day:
        return 0

    total_days = (end_day - start_day).days
    full_weeks, remainder = divmod(total_days, 7)
    weekdays = full_weeks * 5

    current = start_day + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        current += timedelta(days=1)
        if not is_weekend(current):
            weekdays += 1

    return weekdays


def add_weekdays(start: DateLike, count: int) -> date:
    """Date of the count-th weekday after start"""
    current = to_date(start)
    added = 0
    while added < count:
        current += timedelta(days=1)
        if not is_weekend(current):
            added += 1
    return current
