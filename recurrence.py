"""Decide whether a treatment is due on a given calendar day."""

from datetime import date, datetime

from dose_dates import as_day, day_offset, weekday_index
from dose_models import Cycle, Daily, SpecificDays, Treatment, WhenNeeded


def cycle_position(cycle: Cycle, day: date | datetime) -> int:
    """Phase position of ``day`` within a cycle, in ``[0, active + inactive)``.

    The position is ``current`` on the anchor day and moves by one per
    calendar day in either direction.
    """
    return (cycle.current + day_offset(cycle.anchor, day)) % cycle.period


def is_due(treatment: Treatment, day: date | datetime) -> bool:
    """Return True if ``treatment`` has doses scheduled on ``day``.

    Args:
        treatment: Treatment definition.
        day: Target day; a datetime is reduced to its calendar day.

    Returns:
        False outside an enabled duration and always False for when-needed
        treatments (those are only ever recorded as one-time entries).
    """
    day = as_day(day)
    if not treatment.duration.contains(day):
        return False

    freq = treatment.frequency
    if isinstance(freq, Daily):
        return day >= treatment.created
    if isinstance(freq, SpecificDays):
        return weekday_index(day) in freq.days
    if isinstance(freq, Cycle):
        return cycle_position(freq, day) < freq.active
    if isinstance(freq, WhenNeeded):
        return False
    raise TypeError(f"unsupported frequency: {freq!r}")
