"""Date range parsing for commit-record queries."""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TODAY_KEYWORD = "today"
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class DateRangeError(ValueError):
    """Base exception for date range parsing failures."""

    pass


class InvalidDateError(DateRangeError):
    """Exception raised when a date is not YYYY-MM-DD or 'today'."""

    pass


class InvalidRangeError(DateRangeError):
    """Exception raised when the end of the range precedes the start."""

    pass


@dataclass(frozen=True)
class DateRange:
    """A resolved, day-aligned interval in local time."""

    start: datetime
    end: datetime
    label: str


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min).astimezone()


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59)).astimezone()


def _parse_day(value: str, which: str) -> date:
    # strptime alone also accepts unpadded values such as 2024-1-5
    if DATE_PATTERN.fullmatch(value):
        try:
            return datetime.strptime(value, DATE_FORMAT).date()
        except ValueError:
            pass
    raise InvalidDateError(
        f"Invalid {which} date, use YYYY-MM-DD or 'today': {value!r}"
    )


def parse_date_range(
    start_date: str, end_date: str, today: Optional[date] = None
) -> DateRange:
    """Resolve a start/end pair into a concrete interval and a label.

    Empty or 'today' start means today; empty end means the start day;
    'today' end means today. Both bounds are whole days: start at
    00:00:00 and end at 23:59:59.

    Raises:
        InvalidDateError: If either date cannot be parsed
        InvalidRangeError: If the end precedes the start
    """
    today = today or date.today()
    start_value = (start_date or "").strip()
    end_value = (end_date or "").strip()

    if not start_value or start_value.lower() == TODAY_KEYWORD:
        start = _start_of_day(today)
        logger.info(f"Using today as start date: {today.isoformat()}")
    else:
        start = _start_of_day(_parse_day(start_value, "start"))

    if end_value.lower() == TODAY_KEYWORD:
        end = _end_of_day(today)
    elif not end_value:
        end = _end_of_day(start.date())
        logger.debug("End date empty, using end of start day")
    else:
        end = _end_of_day(_parse_day(end_value, "end"))

    if end < start:
        raise InvalidRangeError(
            f"End date {end.date().isoformat()} is before start date "
            f"{start.date().isoformat()}"
        )

    label = start.date().isoformat()
    if end.date() != start.date():
        label = f"{label} to {end.date().isoformat()}"

    logger.info(f"Resolved date range: {label}")
    return DateRange(start=start, end=end, label=label)
