"""Business logic for the API endpoints.

Uses the API client abstractions; no raw HTTP calls live here.
"""

from .average_time import (
    AverageTimeError,
    EmptyTimestampListError,
    InvalidTimestampError,
    UnsupportedCalculateTypeError,
    calculate_average_time,
)
from .commit_records import CommitRecordService, is_user_commit
from .date_range import (
    DateRange,
    DateRangeError,
    InvalidDateError,
    InvalidRangeError,
    parse_date_range,
)

__all__ = [
    "AverageTimeError",
    "EmptyTimestampListError",
    "InvalidTimestampError",
    "UnsupportedCalculateTypeError",
    "calculate_average_time",
    "CommitRecordService",
    "is_user_commit",
    "DateRange",
    "DateRangeError",
    "InvalidDateError",
    "InvalidRangeError",
    "parse_date_range",
]
