"""
Time bucketing for grouped analytics.

Every value is normalised to UTC before it is classified so that the same
transaction always lands in the same bucket whatever offset it was recorded
with. Bucket keys are strings that sort chronologically.
"""
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, List, Union

from dateutil.relativedelta import relativedelta

from app.core.errors import InvalidArgument

DateLike = Union[date, datetime]


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


def parse_granularity(value: Union[str, Granularity]) -> Granularity:
    try:
        return Granularity(value)
    except ValueError:
        allowed = ", ".join(g.value for g in Granularity)
        raise InvalidArgument(f"Invalid granularity {value!r}; expected one of: {allowed}") from None


def to_utc(value: DateLike) -> datetime:
    """Naive datetimes are taken as UTC; plain dates become UTC midnight."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise InvalidArgument(f"Expected a date or datetime, got {type(value).__name__}")


def window_end(value: DateLike) -> datetime:
    """Inclusive upper bound: a plain date covers the whole day."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max, tzinfo=timezone.utc)
    return to_utc(value)


def _quarter(moment: datetime) -> int:
    return (moment.month - 1) // 3 + 1


def _week_key(moment: datetime) -> str:
    iso_year, iso_week, _ = moment.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


_FORMATTERS: Dict[Granularity, Callable[[datetime], str]] = {
    Granularity.DAY: lambda m: m.strftime("%Y-%m-%d"),
    Granularity.WEEK: _week_key,
    Granularity.MONTH: lambda m: m.strftime("%Y-%m"),
    Granularity.QUARTER: lambda m: f"{m.year:04d}-Q{_quarter(m)}",
    Granularity.YEAR: lambda m: f"{m.year:04d}",
}

_STEPS: Dict[Granularity, relativedelta] = {
    Granularity.DAY: relativedelta(days=1),
    Granularity.WEEK: relativedelta(weeks=1),
    Granularity.MONTH: relativedelta(months=1),
    Granularity.QUARTER: relativedelta(months=3),
    Granularity.YEAR: relativedelta(years=1),
}


def bucket(value: DateLike, granularity: Union[str, Granularity]) -> str:
    granularity = parse_granularity(granularity)
    return _FORMATTERS[granularity](to_utc(value))


def bucket_start(value: DateLike, granularity: Union[str, Granularity]) -> datetime:
    """First instant (UTC) of the bucket that contains value."""
    granularity = parse_granularity(granularity)
    midnight = to_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)
    if granularity is Granularity.DAY:
        return midnight
    if granularity is Granularity.WEEK:
        return midnight - timedelta(days=midnight.weekday())
    if granularity is Granularity.MONTH:
        return midnight.replace(day=1)
    if granularity is Granularity.QUARTER:
        return midnight.replace(month=3 * (_quarter(midnight) - 1) + 1, day=1)
    return midnight.replace(month=1, day=1)


def bucket_range(start: DateLike, end: DateLike, granularity: Union[str, Granularity]) -> List[str]:
    """Every bucket key touching [start, end], oldest first. Empty when end < start."""
    granularity = parse_granularity(granularity)
    last = window_end(end)
    keys: List[str] = []
    if to_utc(start) > last:
        return keys
    cursor = bucket_start(start, granularity)
    while cursor <= last:
        keys.append(_FORMATTERS[granularity](cursor))
        cursor = cursor + _STEPS[granularity]
    return keys
