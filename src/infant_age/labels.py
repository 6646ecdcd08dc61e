"""Display text for engine enums and ages.

The engine returns enums and day counts only.  Rendering collaborators
look the text up here (or supply their own table) so wording can change
without touching calculation logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.infant_age.base import DAYS_PER_WEEK, CalendarBreakdown
from src.infant_age.conversions import days_to_weeks_and_days
from src.infant_age.dates import MONTHS_PER_YEAR
from src.infant_age.insights import (
    Advisory,
    CorrectionRelevance,
    DevelopmentalStage,
    MilestoneGuidance,
    PrematurityCategory,
    Recommendation,
)

MINUS_SIGN = "−"

PREMATURITY_LABELS: dict[PrematurityCategory, str] = {
    PrematurityCategory.PERIVIABLE: "Periviable (extremely high risk)",
    PrematurityCategory.EXTREMELY_PRETERM: "Extremely preterm",
    PrematurityCategory.VERY_PRETERM: "Very preterm",
    PrematurityCategory.MODERATE_PRETERM: "Moderate preterm",
    PrematurityCategory.LATE_PRETERM: "Late preterm",
    PrematurityCategory.TERM: "Term",
    PrematurityCategory.POST_TERM: "Post-term",
}

STAGE_LABELS: dict[DevelopmentalStage, str] = {
    DevelopmentalStage.PRE_TERM_EQUIVALENT: "Pre-term equivalent (before due date)",
    DevelopmentalStage.NEWBORN: "Newborn (0-4 weeks corrected)",
    DevelopmentalStage.YOUNG_INFANT: "Young infant (1-3 months corrected)",
    DevelopmentalStage.OLDER_INFANT: "Older infant (3-6 months corrected)",
    DevelopmentalStage.MOBILE_INFANT: "Mobile infant (6-12 months corrected)",
    DevelopmentalStage.TODDLER: "Toddler (1-2 years corrected)",
    DevelopmentalStage.PRESCHOOLER: "Preschooler (2+ years corrected)",
}

RELEVANCE_LABELS: dict[CorrectionRelevance, str] = {
    CorrectionRelevance.LIMITED: "Limited relevance (born at term)",
    CorrectionRelevance.DECREASING: "Decreasing relevance (consider chronological age)",
    CorrectionRelevance.HIGH: "Highly relevant for development assessment",
    CorrectionRelevance.MODERATE: "Moderately relevant for early development",
}

MILESTONE_LABELS: dict[MilestoneGuidance, str] = {
    MilestoneGuidance.PHYSIOLOGICAL_STABILITY: (
        "Focus on basic physiological stability and growth"
    ),
    MilestoneGuidance.CORRECTED_FOR_ALL: "Use corrected age for all developmental milestones",
    MilestoneGuidance.CORRECTED_INDIVIDUALIZED: (
        "Use corrected age, but consider individual development patterns"
    ),
    MilestoneGuidance.CORRECTED_MAJOR_CHRONOLOGICAL_SOCIAL: (
        "Use corrected age for major milestones, chronological for social development"
    ),
    MilestoneGuidance.TRANSITION_TO_CHRONOLOGICAL: (
        "Transition to using chronological age for most assessments"
    ),
}

RECOMMENDATION_LABELS: dict[Recommendation, str] = {
    Recommendation.TRANSITION_TO_CHRONOLOGICAL: (
        "Consider transitioning to chronological age for developmental assessments "
        "as corrected age becomes less relevant after 2-3 years."
    ),
    Recommendation.NEURODEVELOPMENTAL_FOLLOW_UP: (
        "Extremely preterm infants may show different developmental patterns. "
        "Consider neurodevelopmental follow-up."
    ),
    Recommendation.BEFORE_DUE_DATE: (
        "Negative corrected age indicates the infant has not yet reached their "
        "original due date. Focus on basic physiological development."
    ),
    Recommendation.USE_CORRECTED_FIRST_YEAR: (
        "Use corrected age for developmental milestone assessments during the first year."
    ),
    Recommendation.VERY_PRETERM_FOLLOW_UP: (
        "Regular pediatric and developmental follow-up recommended for very preterm infants."
    ),
}

ADVISORY_LABELS: dict[Advisory, str] = {
    Advisory.BIRTH_LONG_AGO: (
        "Birth date is more than 5 years ago. Corrected age is typically only "
        "used for the first 2-3 years of life."
    ),
    Advisory.YOUNG_INFANT: (
        "Infant is very young. Please ensure gestational age is accurate."
    ),
    Advisory.GA_PERIVIABLE: (
        "Very preterm infant (<24 weeks). These calculations should be "
        "interpreted with extreme caution."
    ),
    Advisory.GA_EXTREMELY_PRETERM: (
        "Extremely preterm infant (24-28 weeks). Clinical context is important "
        "for interpreting these calculations."
    ),
    Advisory.GA_VERY_PRETERM: (
        "Very preterm infant (28-32 weeks). Corrected age is particularly "
        "important for developmental assessments."
    ),
    Advisory.GA_POST_TERM: (
        "Post-term infant (≥42 weeks). No prematurity correction applies."
    ),
    Advisory.ASSESSMENT_IN_FUTURE: (
        "Calculation date is in the future. Results will be projected ages."
    ),
    Advisory.OLDER_CHILD: (
        "Corrected age is typically only used for the first 2-3 years of life. "
        "Consider using chronological age for older children."
    ),
    Advisory.TERM_NEWBORN: (
        "Infant was born at term or near-term. Corrected age may not be clinically relevant."
    ),
    Advisory.VERY_NEGATIVE_CORRECTED_AGE: (
        "Corrected age is very negative (more than 20 weeks). Ensure all inputs are correct."
    ),
    Advisory.PRETERM_FIRST_WEEK: (
        "Very preterm infant in first week of life. Clinical interpretation "
        "requires specialized neonatal expertise."
    ),
}

_TABLES: dict[type[Enum], dict] = {
    PrematurityCategory: PREMATURITY_LABELS,
    DevelopmentalStage: STAGE_LABELS,
    CorrectionRelevance: RELEVANCE_LABELS,
    MilestoneGuidance: MILESTONE_LABELS,
    Recommendation: RECOMMENDATION_LABELS,
    Advisory: ADVISORY_LABELS,
}


def describe(value: Enum) -> str:
    """Return the display text for any engine enum member."""
    table = _TABLES.get(type(value))
    if table is None:
        raise KeyError(f"No labels registered for {type(value).__name__}")
    return table[value]


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_age_days(total_days: int) -> str:
    """Format a signed day count as weeks and days.

    Under a week only days are shown.  Negative values get a leading
    minus sign (U+2212), e.g. ``-28 -> "−4 weeks 0 days"``.
    """
    if abs(total_days) < 7:
        text = _plural(abs(total_days), "day")
    else:
        wd = days_to_weeks_and_days(total_days)
        text = f"{_plural(wd.weeks, 'week')} {_plural(wd.days, 'day')}"
    return MINUS_SIGN + text if total_days < 0 else text


@dataclass(frozen=True)
class AgeText:
    """Primary and secondary display strings for one age."""

    primary: str
    secondary: str = ""


def format_age(total_days: int, calendar: CalendarBreakdown | None = None) -> AgeText:
    """Pick a display format by magnitude.

    Under a week: days.  Under a year: weeks and days, with calendar months
    and days as secondary text past 8 weeks.  A year or more: years and
    months, with total weeks as secondary text.

    Month and year text needs ``calendar``; without it (postmenstrual age,
    or a negative corrected age whose breakdown is zero) the weeks and days
    form is used throughout.
    """
    magnitude = abs(total_days)
    has_calendar = calendar is not None and not calendar.is_zero

    if magnitude >= 365 and has_calendar:
        primary = f"{_plural(calendar.years, 'year')} {_plural(calendar.months, 'month')}"
        secondary = f"({_plural(days_to_weeks_and_days(total_days).weeks, 'week')})"
    else:
        primary = format_age_days(magnitude)
        secondary = ""
        if magnitude > 56 and has_calendar:
            months = calendar.years * MONTHS_PER_YEAR + calendar.months
            days = calendar.weeks * DAYS_PER_WEEK + calendar.days
            secondary = f"({_plural(months, 'month')} {_plural(days, 'day')})"

    if total_days < 0:
        primary = MINUS_SIGN + primary
    return AgeText(primary=primary, secondary=secondary)
