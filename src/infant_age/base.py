"""Core data types for the infant age engine.

Every age quantity is carried internally as a signed integer day count.
The records below are immutable and are created fresh for every
calculation; they are the single source of truth consumed by the
validation layer, the insight generator, and any rendering collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, ClassVar

DAYS_PER_WEEK = 7


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class InvalidInput(ValueError):
    """Raised when calculator input violates the input contract.

    Attributes:
        field:   Dotted snake_case identifier of the offending input,
                 e.g. ``"assessment_date"`` or ``"ga_birth.days"``.
        message: Human-readable reason.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AgeKind(str, Enum):
    """Discriminant for the three age records."""

    POSTNATAL = "postnatal"
    POSTMENSTRUAL = "postmenstrual"
    CORRECTED = "corrected"


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GestationalAge:
    """Gestational age in completed weeks plus days (0–6)."""

    weeks: int
    days: int = 0

    @property
    def total_days(self) -> int:
        return self.weeks * DAYS_PER_WEEK + self.days

    @property
    def as_weeks(self) -> float:
        """Fractional weeks, e.g. 32w4d -> 32.571."""
        return self.weeks + self.days / DAYS_PER_WEEK

    def to_dict(self) -> dict:
        return {"weeks": self.weeks, "days": self.days, "total_days": self.total_days}


@dataclass(frozen=True)
class WeeksDays:
    """Magnitude of a day count split into whole weeks and remaining days.

    Both fields are always non-negative.  The sign of the underlying day
    count lives on the owning record (``total_days`` / ``is_negative``).
    """

    weeks: int
    days: int

    @property
    def total_days(self) -> int:
        return self.weeks * DAYS_PER_WEEK + self.days

    def to_dict(self) -> dict:
        return {"weeks": self.weeks, "days": self.days}


@dataclass(frozen=True)
class CalendarBreakdown:
    """Calendar-aware decomposition of the span between two dates."""

    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0

    @property
    def is_zero(self) -> bool:
        return not (self.years or self.months or self.weeks or self.days)

    def to_dict(self) -> dict:
        return {
            "years": self.years,
            "months": self.months,
            "weeks": self.weeks,
            "days": self.days,
        }


@dataclass(frozen=True)
class CalculatorInputs:
    """Validated calculator input.

    Attributes:
        birth_date:      Calendar date of birth.
        assessment_date: Calendar date the ages are computed for.  Never
                         earlier than ``birth_date``.
        ga_birth:        Gestational age at birth.
        use_correction:  Whether the prematurity offset is applied.
    """

    birth_date: date
    assessment_date: date
    ga_birth: GestationalAge
    use_correction: bool = True

    def to_dict(self) -> dict:
        return {
            "birth_date": self.birth_date.isoformat(),
            "assessment_date": self.assessment_date.isoformat(),
            "ga_birth": self.ga_birth.to_dict(),
            "use_correction": self.use_correction,
        }


# ---------------------------------------------------------------------------
# Age records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgeResult:
    """Fields shared by every age record.

    Attributes:
        total_days: Signed day count.
        weeks_days: Magnitude of ``total_days`` as weeks + days.
    """

    kind: ClassVar[AgeKind]

    total_days: int
    weeks_days: WeeksDays

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "total_days": self.total_days,
            "weeks_days": self.weeks_days.to_dict(),
        }


@dataclass(frozen=True)
class PostnatalAge(AgeResult):
    """Chronological age: calendar days elapsed since birth."""

    kind: ClassVar[AgeKind] = AgeKind.POSTNATAL

    calendar: CalendarBreakdown = field(default_factory=CalendarBreakdown)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["calendar"] = self.calendar.to_dict()
        return data


@dataclass(frozen=True)
class PostmenstrualAge(AgeResult):
    """Gestational age at birth plus postnatal age.

    Attributes:
        is_term_equivalent:   True once PMA has reached term.
        days_to_term:         Days remaining until term (0 once reached).
        term_equivalent_date: Date on which PMA reaches term.
    """

    kind: ClassVar[AgeKind] = AgeKind.POSTMENSTRUAL

    is_term_equivalent: bool = False
    days_to_term: int = 0
    term_equivalent_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "is_term_equivalent": self.is_term_equivalent,
                "days_to_term": self.days_to_term,
                "term_equivalent_date": (
                    self.term_equivalent_date.isoformat()
                    if self.term_equivalent_date
                    else None
                ),
            }
        )
        return data


@dataclass(frozen=True)
class CorrectedAge(AgeResult):
    """Postnatal age minus the prematurity offset.

    ``total_days`` is negative while the infant has not yet reached the
    corrected due date; ``calendar`` is then the zero breakdown.

    Attributes:
        calendar:             Breakdown from ``corrected_birth_date`` to the
                              assessment date.
        correction_days:      Offset actually applied (0 if disabled).
        is_negative:          True before the corrected due date.
        corrected_birth_date: Birth date shifted forward by the offset.
    """

    kind: ClassVar[AgeKind] = AgeKind.CORRECTED

    calendar: CalendarBreakdown = field(default_factory=CalendarBreakdown)
    correction_days: int = 0
    is_negative: bool = False
    corrected_birth_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "calendar": self.calendar.to_dict(),
                "correction_days": self.correction_days,
                "is_negative": self.is_negative,
                "corrected_birth_date": (
                    self.corrected_birth_date.isoformat()
                    if self.corrected_birth_date
                    else None
                ),
            }
        )
        return data


@dataclass(frozen=True)
class ResultMetadata:
    """Clinical metadata derived from the computed ages."""

    is_premature: bool
    is_correction_applied: bool
    correction_recommended_until_months: int
    ga_birth_weeks: float

    def to_dict(self) -> dict:
        return {
            "is_premature": self.is_premature,
            "is_correction_applied": self.is_correction_applied,
            "correction_recommended_until_months": self.correction_recommended_until_months,
            "ga_birth_weeks": round(self.ga_birth_weeks, 4),
        }
