from datetime import MAXYEAR, MINYEAR, datetime
from typing import Optional, Tuple

from dateutil import tz
from dateutil.relativedelta import relativedelta

from spark_monitoring.errors import UnknownCommand

# yyyy-MM-dd'T'HH:mm:ss.SSS, the server appends a zone name we ignore
SOURCE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"
SOURCE_LENGTH = len("2016-04-11T08:30:23.123")
DISPLAY_FORMAT = "%Y/%m/%d %H:%M:%S"

HOUR_MILLIS = 3600 * 1000
DAY_MILLIS = 24 * HOUR_MILLIS
BUCKET_LENGTHS = {
    "hour": HOUR_MILLIS,
    "day": DAY_MILLIS,
    "month": 30 * DAY_MILLIS,
    "year": 365 * DAY_MILLIS,
}
STAT_BUCKETS = tuple(BUCKET_LENGTHS)

EPOCH = datetime(1970, 1, 1)


def to_millis(dt: datetime) -> int:
    whole = dt.replace(microsecond=0)
    try:
        seconds = whole.timestamp()
    except (OverflowError, OSError, ValueError):
        # the platform cannot place dates next to MINYEAR, use the offset at the epoch
        offset = tz.tzlocal().utcoffset(EPOCH).total_seconds()
        seconds = (whole - EPOCH).total_seconds() - offset
    return int(seconds) * 1000 + dt.microsecond // 1000


def from_millis(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / 1000)


def _parse(text, fmt, length=None) -> Optional[int]:
    if text is None:
        return None
    text = text.strip()
    if length is not None:
        text = text[:length]
    try:
        return to_millis(datetime.strptime(text, fmt))
    except ValueError:
        return None


def parse_source_timestamp(text: Optional[str]) -> Optional[int]:
    """Epoch millis of a server timestamp read as local time, ``None`` if it does not match."""
    return _parse(text, SOURCE_FORMAT, SOURCE_LENGTH)


def parse_display(text: Optional[str]) -> Optional[int]:
    return _parse(text, DISPLAY_FORMAT)


def format_display(millis: Optional[int]) -> Optional[str]:
    if millis is None:
        return None
    return from_millis(millis).strftime(DISPLAY_FORMAT)


def _to_int(value, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _clamp_year(year: int) -> int:
    return min(max(year, MINYEAR), MAXYEAR)


def resolve_bucket(
    bucket: str,
    arg1: Optional[str] = None,
    arg2: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[int, int]:
    """Resolve a named time bucket into an inclusive ``(start, end)`` range in epoch millis.

    With both arguments the range spans the two calendar points (hours of
    today, days of this month, 0-based months of this year, or absolute
    years). Without ``arg2`` the end defaults to the current hour, day, month
    or year and ``arg1`` is read as a look-back of that many buckets.
    Months and years in the look-back are 30 and 365 days long.
    """
    now = now or datetime.now()
    kind = bucket.lower()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if kind == "hour":
        span = _to_int(arg1, 0)
        start = today + relativedelta(hours=span)
        end = today + relativedelta(hours=_to_int(arg2, now.hour))
    elif kind == "day":
        first_day = today.replace(day=1)
        span = _to_int(arg1, 1)
        start = first_day + relativedelta(days=span - 1)
        end = first_day + relativedelta(
            days=_to_int(arg2, now.day) - 1, hours=23, minutes=59, seconds=59
        )
    elif kind == "month":
        january = today.replace(month=1, day=1)
        span = _to_int(arg1, 0)
        start = january + relativedelta(months=span)
        end = january + relativedelta(months=_to_int(arg2, now.month - 1) + 1, seconds=-1)
    elif kind == "year":
        # starts on Feb 1 of arg1 (year 1 by default) and ends on Jan 31 after
        # arg2, the long-standing window, see DESIGN.md
        span = _to_int(arg1, 1)
        start = datetime(_clamp_year(span), 2, 1)
        end_year = min(_to_int(arg2, now.year), MAXYEAR - 1)
        end = datetime(_clamp_year(end_year + 1), 1, 31, 23, 59, 59)
    else:
        raise UnknownCommand(f"Unknown time bucket '{bucket}'")

    end_millis = to_millis(end)
    if arg2 is None:
        return end_millis - span * BUCKET_LENGTHS[kind], end_millis
    return to_millis(start), end_millis
