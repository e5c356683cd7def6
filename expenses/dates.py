"""Calendar helpers for the week/month filters.

Boundaries are computed on wall-clock dates in the zone of ``now``: a naive
``now`` means local time, an aware one brings its own ``tzinfo``. Record
timestamps are converted into that same zone before they are compared, so a
DST change never moves a boundary away from midnight.
"""

import calendar
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union

from expenses.errors import ValidationError

SUNDAY = calendar.SUNDAY
MONDAY = calendar.MONDAY


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("ts", value, f"Timestamp {value!r} is empty or not a string")
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError("ts", value, f"Timestamp {value!r} is not ISO-8601") from None


def to_local(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Express ``moment`` as wall-clock time in ``tz``.

    With ``tz`` None the result is naive local time. Naive inputs are taken to
    be wall-clock time already.
    """
    if tz is None:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone().replace(tzinfo=None)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def start_of_day(day: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def start_of_week(now: datetime, first_weekday: int = SUNDAY) -> datetime:
    days_back = (now.weekday() - first_weekday) % 7
    return start_of_day(now.date() - timedelta(days=days_back), now.tzinfo)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now.date().replace(day=1), now.tzinfo)
