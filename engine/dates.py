from datetime import date, datetime, timedelta
from typing import Optional


def as_date(value) -> Optional[date]:
    """
    Coerce ``value`` to a calendar date.

    Accepts ``date``, ``datetime`` (time of day is dropped) and ISO-8601
    strings. Blank or unparseable input yields None; a bad date is never an
    error for the engine, callers fall back to documented defaults instead.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``; negative when end comes first."""
    return (end - start).days


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def week_start(day: date) -> date:
    # Monday
    return day - timedelta(days=day.weekday())
