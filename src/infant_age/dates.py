"""Calendar-day normalization and date-span arithmetic.

All engine arithmetic runs on ``datetime.date`` values.  Anything date-like
coming in from a collaborator (a ``datetime`` with or without tzinfo, an ISO
string from a form field or query string) is first reduced to its calendar
day so that time-of-day and DST offsets can never shift a day count.

Aware datetimes are converted to UTC before the day is taken.  Naive
datetimes keep their wall-clock calendar date.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone

from src.infant_age.base import DAYS_PER_WEEK, CalendarBreakdown, InvalidInput

MONTHS_PER_YEAR = 12


def to_canonical_day(value: date | datetime | str, field: str = "date") -> date:
    """Reduce a date-like value to a plain calendar date.

    Args:
        value: ``date``, ``datetime`` or ISO-8601 string
               (``"2024-01-15"``, ``"2024-01-15T23:30:00-05:00"``, ``"...Z"``).
        field: Field identifier used if the value cannot be interpreted.

    Returns:
        The calendar date.  Passing a ``date`` returns an equal ``date``.

    Raises:
        InvalidInput: If the value is missing, of the wrong type, or not a
                      real calendar date.
    """
    # datetime is a subclass of date, so it must be checked first
    if isinstance(value, datetime):
        if value.tzinfo is not None and value.utcoffset() is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    if isinstance(value, str):
        return _parse_iso(value.strip(), field)
    if value is None:
        raise InvalidInput(field, "a date is required")
    raise InvalidInput(field, f"expected a date, got {type(value).__name__}")


def _parse_iso(text: str, field: str) -> date:
    if not text:
        raise InvalidInput(field, "a date is required")
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise InvalidInput(field, f"{text!r} is not a valid YYYY-MM-DD date") from None
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        raise InvalidInput(field, f"{text!r} is not a valid ISO-8601 date") from None
    return to_canonical_day(parsed, field)


def days_between(start: date, end: date) -> int:
    """Calendar-day difference ``end - start`` (negative if end is earlier)."""
    return (to_canonical_day(end) - to_canonical_day(start)).days


def add_days(day: date, days: int) -> date:
    return to_canonical_day(day) + timedelta(days=days)


def add_months(day: date, months: int) -> date:
    """Shift by whole calendar months, clamping to the last day of the month.

    Jan 31 + 1 month -> Feb 28 (or 29 in a leap year).
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // MONTHS_PER_YEAR
    month = month_index % MONTHS_PER_YEAR + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def whole_months_between(start: date, end: date) -> int:
    """Number of complete calendar months from ``start`` to ``end``.

    A month counts once the start's day-of-month has been reached, so
    Jan 30 -> Feb 28 is 0 complete months, Jan 15 -> Feb 15 is 1.
    Returns 0 for reversed spans.
    """
    if end <= start:
        return 0
    months = (end.year - start.year) * MONTHS_PER_YEAR + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def calendar_breakdown(start: date, end: date) -> CalendarBreakdown:
    """Decompose the span ``start -> end`` into years, months, weeks and days.

    Uses real month and year lengths rather than average-day constants.
    A reversed or empty span yields the zero breakdown; a negative calendar
    duration is not represented.

    Args:
        start: Reference date (birth date or corrected birth date).
        end:   Assessment date.

    Returns:
        CalendarBreakdown with all fields non-negative.
    """
    start = to_canonical_day(start)
    end = to_canonical_day(end)
    if end <= start:
        return CalendarBreakdown()

    total_months = whole_months_between(start, end)
    years, months = divmod(total_months, MONTHS_PER_YEAR)
    remaining = (end - add_months(start, total_months)).days
    weeks, days = divmod(remaining, DAYS_PER_WEEK)
    return CalendarBreakdown(years=years, months=months, weeks=weeks, days=days)
