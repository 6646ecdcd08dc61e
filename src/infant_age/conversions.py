"""Day-count conversions between gestational notation and weeks + days."""

from __future__ import annotations

from src.infant_age.base import DAYS_PER_WEEK, GestationalAge, InvalidInput, WeeksDays


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def gestational_age_to_days(ga: GestationalAge) -> int:
    """Return ``weeks * 7 + days`` for a gestational age.

    Raises:
        InvalidInput: ``ga_birth.weeks`` if weeks is negative or not an
                      integer, ``ga_birth.days`` if days is outside 0–6.
    """
    if not _is_int(ga.weeks) or ga.weeks < 0:
        raise InvalidInput("ga_birth.weeks", "weeks must be a non-negative integer")
    if not _is_int(ga.days) or not 0 <= ga.days < DAYS_PER_WEEK:
        raise InvalidInput("ga_birth.days", "days must be between 0 and 6")
    return ga.weeks * DAYS_PER_WEEK + ga.days


def days_to_weeks_and_days(total_days: int) -> WeeksDays:
    """Split the magnitude of a day count into whole weeks and remaining days.

    -10 -> WeeksDays(weeks=1, days=3).  Callers keep the sign.
    """
    weeks, days = divmod(abs(total_days), DAYS_PER_WEEK)
    return WeeksDays(weeks=weeks, days=days)
