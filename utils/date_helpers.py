"""Date and time utility functions for report bucketing."""
import calendar
from datetime import date, datetime, timedelta
from typing import Optional

import pytz

from constants import (
    MONTH_KEY_FORMAT,
    MONTH_LABEL_FORMAT,
    RANGE_WEEK,
    RANGE_MONTH,
    RANGE_QUARTER,
    RANGE_YEAR,
)
from exceptions import InvalidInputError


def get_current_utc() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current UTC datetime
    """
    return datetime.now(pytz.UTC)


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo, matching stored timestamps."""
    return get_current_utc().replace(tzinfo=None)


def subtract_months(dt: datetime, months: int) -> datetime:
    """
    Step a datetime back by whole calendar months.

    The day is clamped to the last day of the target month (Mar 31 - 1 month
    = Feb 28/29).

    Args:
        dt: Datetime to move
        months: Number of months to go back

    Returns:
        Shifted datetime
    """
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def range_start(range_name: str, now: Optional[datetime] = None) -> datetime:
    """
    Convert a named report range to a concrete start cutoff.

    week = 7 days back; month, quarter and year step back whole calendar
    months (1, 3 and 12) from now.

    Args:
        range_name: One of week, month, quarter, year
        now: Reference time (default: current UTC, naive)

    Returns:
        Start datetime (inclusive)

    Raises:
        InvalidInputError: If the range name is unknown
    """
    if now is None:
        now = utcnow_naive()

    if range_name == RANGE_WEEK:
        return now - timedelta(days=7)
    if range_name == RANGE_MONTH:
        return subtract_months(now, 1)
    if range_name == RANGE_QUARTER:
        return subtract_months(now, 3)
    if range_name == RANGE_YEAR:
        return subtract_months(now, 12)

    raise InvalidInputError(
        f"Unknown report range {range_name!r}; expected week, month, quarter or year"
    )


def start_of_month(reference: Optional[datetime] = None) -> datetime:
    """
    First instant of the calendar month containing reference.

    Args:
        reference: Reference time (default: current UTC, naive)

    Returns:
        Datetime at midnight on day 1
    """
    if reference is None:
        reference = utcnow_naive()
    return reference.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def month_key(dt: date | datetime) -> str:
    """Bucket key (YYYY-MM) for a date or datetime."""
    return dt.strftime(MONTH_KEY_FORMAT)


def month_label(key: str) -> str:
    """Short display label ("Jan 25") for a YYYY-MM key."""
    return datetime.strptime(key, MONTH_KEY_FORMAT).strftime(MONTH_LABEL_FORMAT)
