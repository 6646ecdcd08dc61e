"""Tests for calendar-day normalization and calendar breakdowns."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.infant_age.base import CalendarBreakdown, InvalidInput
from src.infant_age.dates import (
    add_days,
    add_months,
    calendar_breakdown,
    days_between,
    to_canonical_day,
    whole_months_between,
)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


class TestToCanonicalDay:
    def test_date_passes_through(self) -> None:
        assert to_canonical_day(date(2024, 1, 15)) == date(2024, 1, 15)

    def test_naive_datetime_keeps_wall_clock_day(self) -> None:
        assert to_canonical_day(datetime(2024, 1, 15, 23, 59, 59)) == date(2024, 1, 15)

    def test_aware_datetime_uses_utc_day(self) -> None:
        # 23:30 in UTC-5 is 04:30 UTC the next day
        value = datetime(2024, 1, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert to_canonical_day(value) == date(2024, 1, 16)

    def test_result_is_plain_date(self) -> None:
        result = to_canonical_day(datetime(2024, 1, 15, 12, 0))
        assert type(result) is date

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2024-01-15", date(2024, 1, 15)),
            ("  2024-01-15 ", date(2024, 1, 15)),
            ("2024-01-15T10:00:00Z", date(2024, 1, 15)),
            ("2024-01-15T23:30:00-05:00", date(2024, 1, 16)),
            ("2024-01-15T23:59:59", date(2024, 1, 15)),
        ],
    )
    def test_iso_strings(self, text: str, expected: date) -> None:
        assert to_canonical_day(text) == expected

    @pytest.mark.parametrize(
        "value",
        [
            date(2024, 2, 29),
            datetime(2024, 2, 29, 18, 45, tzinfo=timezone.utc),
            "2024-02-29T06:00:00+02:00",
        ],
    )
    def test_idempotent(self, value) -> None:
        once = to_canonical_day(value)
        assert to_canonical_day(once) == once

    def test_impossible_date_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="not a valid") as exc_info:
            to_canonical_day("2023-02-29", field="birth_date")
        assert exc_info.value.field == "birth_date"

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidInput):
            to_canonical_day("next tuesday")

    def test_empty_string_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="required"):
            to_canonical_day("   ")

    def test_none_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="required"):
            to_canonical_day(None)  # type: ignore[arg-type]

    def test_wrong_type_rejected(self) -> None:
        with pytest.raises(InvalidInput, match="int"):
            to_canonical_day(20240115)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Day arithmetic
# ---------------------------------------------------------------------------


class TestDaysBetween:
    def test_forward(self) -> None:
        assert days_between(date(2024, 1, 15), date(2024, 2, 12)) == 28

    def test_backward_is_negative(self) -> None:
        assert days_between(date(2024, 1, 15), date(2024, 1, 14)) == -1

    def test_same_day(self) -> None:
        assert days_between(date(2024, 1, 15), date(2024, 1, 15)) == 0

    def test_ignores_time_of_day(self) -> None:
        late = datetime(2024, 3, 9, 23, 59)
        early = datetime(2024, 3, 10, 0, 1)
        assert days_between(late, early) == 1

    def test_across_dst_change(self) -> None:
        # US spring-forward night; calendar days, not elapsed hours
        assert days_between(date(2024, 3, 9), date(2024, 3, 11)) == 2

    @pytest.mark.parametrize("offset", [0, 1, 29, 365, 366, 1000])
    @pytest.mark.parametrize("start", [date(2023, 2, 28), date(2024, 2, 29), date(2024, 12, 31)])
    def test_antisymmetric(self, start: date, offset: int) -> None:
        end = start + timedelta(days=offset)
        assert days_between(start, end) == -days_between(end, start) == offset


class TestAddMonths:
    def test_simple(self) -> None:
        assert add_months(date(2024, 1, 15), 2) == date(2024, 3, 15)

    def test_clamps_to_month_end(self) -> None:
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_year_rollover(self) -> None:
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_negative(self) -> None:
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
        assert add_months(date(2024, 12, 1), -60) == date(2019, 12, 1)

    def test_add_days(self) -> None:
        assert add_days(date(2024, 1, 15), 84) == date(2024, 4, 8)
        assert add_days(date(2024, 1, 15), -14) == date(2024, 1, 1)


class TestWholeMonthsBetween:
    def test_day_not_reached(self) -> None:
        assert whole_months_between(date(2023, 1, 30), date(2023, 2, 28)) == 0

    def test_day_reached(self) -> None:
        assert whole_months_between(date(2024, 1, 15), date(2024, 2, 15)) == 1

    def test_reversed_is_zero(self) -> None:
        assert whole_months_between(date(2024, 2, 15), date(2024, 1, 15)) == 0


# ---------------------------------------------------------------------------
# Calendar breakdown
# ---------------------------------------------------------------------------


class TestCalendarBreakdown:
    @pytest.mark.parametrize(
        "day", [date(2024, 1, 15), date(2024, 2, 29), date(2023, 12, 31)]
    )
    def test_same_day_is_zero(self, day: date) -> None:
        result = calendar_breakdown(day, day)
        assert result == CalendarBreakdown()
        assert result.is_zero

    def test_reversed_span_is_zero(self) -> None:
        assert calendar_breakdown(date(2024, 4, 8), date(2024, 3, 11)).is_zero

    def test_four_weeks(self) -> None:
        assert calendar_breakdown(date(2024, 1, 15), date(2024, 2, 12)) == CalendarBreakdown(
            weeks=4
        )

    def test_partial_month_at_short_month_end(self) -> None:
        # Day 30 is never reached in a 28-day February
        assert calendar_breakdown(date(2023, 1, 30), date(2023, 2, 28)) == CalendarBreakdown(
            weeks=4, days=1
        )

    def test_full_months_from_month_end(self) -> None:
        assert calendar_breakdown(date(2023, 1, 31), date(2023, 3, 31)) == CalendarBreakdown(
            months=2
        )

    def test_clamped_anchor(self) -> None:
        # One complete month anchors on Feb 28, then 5 days into March
        assert calendar_breakdown(date(2023, 1, 31), date(2023, 3, 5)) == CalendarBreakdown(
            months=1, days=5
        )

    def test_leap_day_birthday(self) -> None:
        assert calendar_breakdown(date(2024, 2, 29), date(2025, 2, 28)) == CalendarBreakdown(
            months=11, weeks=4, days=2
        )
        assert calendar_breakdown(date(2024, 2, 29), date(2025, 3, 1)) == CalendarBreakdown(
            years=1, days=1
        )

    def test_years_months_weeks_days(self) -> None:
        assert calendar_breakdown(date(2022, 3, 10), date(2024, 5, 20)) == CalendarBreakdown(
            years=2, months=2, weeks=1, days=3
        )

    def test_accepts_strings(self) -> None:
        assert calendar_breakdown("2024-01-15", "2024-03-11") == CalendarBreakdown(
            months=1, weeks=3, days=4
        )
