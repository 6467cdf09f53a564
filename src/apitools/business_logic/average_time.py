"""Average time-of-day calculation."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..server.models import HOUR_MINUTE_SECOND, AverageTimeRequest, AverageTimeResponse

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


class AverageTimeError(ValueError):
    """Base exception for average-time calculation failures."""

    pass


class EmptyTimestampListError(AverageTimeError):
    pass


class UnsupportedCalculateTypeError(AverageTimeError):
    pass


class InvalidTimestampError(AverageTimeError):
    """Exception raised when a timestamp is outside the supported date range."""

    pass


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int
    second: int

    @property
    def seconds_since_midnight(self) -> int:
        return (
            self.hour * SECONDS_PER_HOUR + self.minute * SECONDS_PER_MINUTE + self.second
        )


def to_times_of_day(timestamps: Iterable[int]) -> List[TimeOfDay]:
    """Convert epoch seconds into local wall-clock times."""
    times = []
    for ts in timestamps:
        try:
            moment = datetime.fromtimestamp(ts)
        except (ValueError, OverflowError, OSError) as e:
            raise InvalidTimestampError(f"timestamp out of range: {ts} ({e})")
        times.append(TimeOfDay(moment.hour, moment.minute, moment.second))
    return times


def average_seconds_since_midnight(times: List[TimeOfDay]) -> int:
    """Mean of seconds-since-midnight, rounded to the minute if no input has seconds."""
    if not times:
        raise EmptyTimestampListError("timestamp list cannot be empty")

    average = sum(t.seconds_since_midnight for t in times) // len(times)

    if not any(t.second for t in times):
        average = (average + 30) // SECONDS_PER_MINUTE * SECONDS_PER_MINUTE

    return average


def calculate_average_time(
    request: AverageTimeRequest, now: Optional[datetime] = None
) -> AverageTimeResponse:
    """Compute the average time of day and anchor it on the current day.

    Raises:
        UnsupportedCalculateTypeError: If calculate_type is not supported
        EmptyTimestampListError: If no timestamps were given
        InvalidTimestampError: If a timestamp cannot be converted to local time
    """
    if request.calculate_type != HOUR_MINUTE_SECOND:
        raise UnsupportedCalculateTypeError(
            f"calculate type not supported: {request.calculate_type!r}"
        )
    if not request.timestamp_list:
        raise EmptyTimestampListError("timestamp list cannot be empty")

    average = average_seconds_since_midnight(to_times_of_day(request.timestamp_list))

    now = now or datetime.now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    average_moment = midnight + timedelta(seconds=average)

    logger.debug(
        f"Average of {len(request.timestamp_list)} timestamps: "
        f"{average_moment.strftime('%H:%M:%S')}"
    )

    return AverageTimeResponse(
        code=200,
        message="ok",
        average_time=average_moment.strftime("%Y-%m-%d %H:%M:%S"),
        average_timestamp=int(average_moment.timestamp()),
        hhmmss=average_moment.strftime("%H:%M:%S"),
    )
