"""Calendar-day helpers shared by the recurrence, backfill and today logic.

All comparisons here work on *local calendar days* (``datetime.date``), never
on elapsed seconds, so a daylight-saving shift can not push a dose onto the
wrong day. Timestamps are kept as naive local datetimes in memory and written
as ISO strings on disk.
"""

from datetime import date, datetime, time, timedelta

DAY_FMT = "%Y-%m-%d"

# Weekday labels in the index order used by ``days`` sets (0 = Sunday).
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def local_now() -> datetime:
    """Default clock: the current local wall-clock time (naive)."""
    return datetime.now()


def as_day(value: date | datetime) -> date:
    """Return the calendar day of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def format_date(value: date | datetime) -> str:
    """Format a date/datetime as ``YYYY-MM-DD``."""
    return as_day(value).strftime(DAY_FMT)


def same_day(a: date | datetime, b: date | datetime) -> bool:
    return as_day(a) == as_day(b)


def day_offset(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier).

    Uses proleptic ordinals, so the result is independent of the time of day
    and of any DST transition between the two dates.
    """
    return as_day(end).toordinal() - as_day(start).toordinal()


def date_difference(start: date | datetime, end: date | datetime) -> list[date]:
    """Enumerate every calendar day from ``start`` to ``end``, both inclusive.

    Example:
        date_difference(date(2024, 3, 30), date(2024, 4, 1))
        -> [2024-03-30, 2024-03-31, 2024-04-01]

    Returns:
        Ascending list of days; empty if ``end`` is before ``start``.
    """
    first = as_day(start)
    return [first + timedelta(days=i) for i in range(day_offset(first, end) + 1)]


def weekday_index(value: date | datetime) -> int:
    """Weekday of a day with Sunday as 0 and Saturday as 6.

    Python's ``date.weekday()`` starts at Monday; the stored ``days`` sets
    start at Sunday.
    """
    return (as_day(value).weekday() + 1) % 7


def at_time(day: date, hh: int, mm: int) -> datetime:
    """Combine a day with an (hour, minute) slot time."""
    return datetime.combine(day, time(hh, mm))


def next_midnight(now: datetime) -> datetime:
    return datetime.combine(now.date() + timedelta(days=1), time.min)


def seconds_until_next_midnight(now: datetime) -> float:
    """Seconds from ``now`` to the next local midnight.

    Callers must recompute this from the wall clock every time the midnight
    timer fires; a fixed 24h interval drifts after suspend/resume.
    """
    return (next_midnight(now) - now).total_seconds()


# ---------------- (de)serialization ----------------
def to_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO timestamp into a naive local datetime.

    Accepts the trailing ``Z`` written by older files; aware values are
    converted to local time before the tzinfo is dropped.

    Raises:
        ValueError: if ``raw`` is not an ISO timestamp.
    """
    value = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def parse_day(raw: str | int | float) -> date:
    """Parse a stored calendar day.

    Accepts ``YYYY-MM-DD``, a full ISO timestamp, or Unix seconds (older files
    stored duration bounds that way, sometimes as strings).

    Raises:
        ValueError: if ``raw`` matches none of the accepted shapes.
    """
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return datetime.fromtimestamp(raw).date()
    text = str(raw).strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text)).date()
    if len(text) == 10:
        return datetime.strptime(text, DAY_FMT).date()
    return parse_timestamp(text).date()
