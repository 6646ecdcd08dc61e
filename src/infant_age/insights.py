"""Clinical classification and guidance derived from computed ages.

Everything here is a table lookup over values the calculator has already
produced.  Results are enums with stable slug values; display text is
resolved by the caller (see ``labels``).

Threshold tables come from the age policy:
    prematurity (completed weeks)   <24 periviable, <28 extremely preterm,
                                    <32 very preterm, <34 moderate, <37 late,
                                    ≤42 term, >42 post-term
    developmental stage (CA days)   <0, <28, <84, <180, <365, <730, else
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from src.infant_age.base import CalculatorInputs, WeeksDays
from src.infant_age.config_loader import AgePolicyConfig, get_policy_config
from src.infant_age.conversions import days_to_weeks_and_days
from src.infant_age.dates import add_months, days_between


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PrematurityCategory(str, Enum):
    PERIVIABLE = "periviable"
    EXTREMELY_PRETERM = "extremely_preterm"
    VERY_PRETERM = "very_preterm"
    MODERATE_PRETERM = "moderate_preterm"
    LATE_PRETERM = "late_preterm"
    TERM = "term"
    POST_TERM = "post_term"


class DevelopmentalStage(str, Enum):
    PRE_TERM_EQUIVALENT = "pre_term_equivalent"
    NEWBORN = "newborn"
    YOUNG_INFANT = "young_infant"
    OLDER_INFANT = "older_infant"
    MOBILE_INFANT = "mobile_infant"
    TODDLER = "toddler"
    PRESCHOOLER = "preschooler"


class CorrectionRelevance(str, Enum):
    LIMITED = "limited"            # born at term
    DECREASING = "decreasing"      # past the recommended correction window
    HIGH = "high"                  # very preterm
    MODERATE = "moderate"


class MilestoneGuidance(str, Enum):
    PHYSIOLOGICAL_STABILITY = "physiological_stability"
    CORRECTED_FOR_ALL = "corrected_for_all"
    CORRECTED_INDIVIDUALIZED = "corrected_individualized"
    CORRECTED_MAJOR_CHRONOLOGICAL_SOCIAL = "corrected_major_chronological_social"
    TRANSITION_TO_CHRONOLOGICAL = "transition_to_chronological"


class TermStatusKind(str, Enum):
    PRE_TERM = "pre_term"
    TERM_EQUIVALENT = "term_equivalent"


class Recommendation(str, Enum):
    TRANSITION_TO_CHRONOLOGICAL = "transition_to_chronological"
    NEURODEVELOPMENTAL_FOLLOW_UP = "neurodevelopmental_follow_up"
    BEFORE_DUE_DATE = "before_due_date"
    USE_CORRECTED_FIRST_YEAR = "use_corrected_first_year"
    VERY_PRETERM_FOLLOW_UP = "very_preterm_follow_up"


class Advisory(str, Enum):
    """Non-blocking warnings over valid-but-unusual input."""

    BIRTH_LONG_AGO = "birth_long_ago"
    YOUNG_INFANT = "young_infant"
    GA_PERIVIABLE = "ga_periviable"
    GA_EXTREMELY_PRETERM = "ga_extremely_preterm"
    GA_VERY_PRETERM = "ga_very_preterm"
    GA_POST_TERM = "ga_post_term"
    ASSESSMENT_IN_FUTURE = "assessment_in_future"
    OLDER_CHILD = "older_child"
    TERM_NEWBORN = "term_newborn"
    VERY_NEGATIVE_CORRECTED_AGE = "very_negative_corrected_age"
    PRETERM_FIRST_WEEK = "preterm_first_week"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TermStatus:
    """Position of postmenstrual age relative to term.

    Attributes:
        status:     Before or at/after term equivalent.
        days:       Days until term (pre_term) or since term (term_equivalent).
        weeks_days: ``days`` as weeks + days.
    """

    status: TermStatusKind
    days: int
    weeks_days: WeeksDays

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "days": self.days,
            "weeks_days": self.weeks_days.to_dict(),
        }


@dataclass(frozen=True)
class Insights:
    prematurity_level: PrematurityCategory
    developmental_stage: DevelopmentalStage
    correction_relevance: CorrectionRelevance
    milestone_guidance: MilestoneGuidance
    term_status: TermStatus
    recommendations: list[Recommendation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "prematurity_level": self.prematurity_level.value,
            "developmental_stage": self.developmental_stage.value,
            "correction_relevance": self.correction_relevance.value,
            "milestone_guidance": self.milestone_guidance.value,
            "term_status": self.term_status.to_dict(),
            "recommendations": [r.value for r in self.recommendations],
        }


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def classify_prematurity(
    completed_weeks: int, config: AgePolicyConfig | None = None
) -> PrematurityCategory:
    """Classify gestational age at birth by completed weeks."""
    policy = (config or get_policy_config()).prematurity
    for tier, upper in policy.thresholds.items():
        if completed_weeks < upper:
            return PrematurityCategory(tier)
    if completed_weeks <= policy.post_term_above_weeks:
        return PrematurityCategory.TERM
    return PrematurityCategory.POST_TERM


def developmental_stage(
    corrected_days: int, config: AgePolicyConfig | None = None
) -> DevelopmentalStage:
    """Map corrected age in days to a developmental stage."""
    if corrected_days < 0:
        return DevelopmentalStage.PRE_TERM_EQUIVALENT
    for stage, upper in (config or get_policy_config()).developmental_stages.items():
        if corrected_days < upper:
            return DevelopmentalStage(stage)
    return DevelopmentalStage.PRESCHOOLER


def correction_relevance(
    pna_days: int, completed_weeks: int, config: AgePolicyConfig | None = None
) -> CorrectionRelevance:
    policy = config or get_policy_config()
    if completed_weeks >= policy.prematurity.premature_below_weeks:
        return CorrectionRelevance.LIMITED
    if pna_days > policy.correction_window_days:
        return CorrectionRelevance.DECREASING
    if completed_weeks < policy.prematurity.thresholds["very_preterm"]:
        return CorrectionRelevance.HIGH
    return CorrectionRelevance.MODERATE


def milestone_guidance(
    corrected_days: int, completed_weeks: int, config: AgePolicyConfig | None = None
) -> MilestoneGuidance:
    policy = config or get_policy_config()
    stages = policy.developmental_stages
    if corrected_days < 0:
        return MilestoneGuidance.PHYSIOLOGICAL_STABILITY
    if corrected_days < stages["young_infant"]:
        return MilestoneGuidance.CORRECTED_FOR_ALL
    if corrected_days < stages["toddler"]:
        if completed_weeks < policy.prematurity.thresholds["very_preterm"]:
            return MilestoneGuidance.CORRECTED_INDIVIDUALIZED
        return MilestoneGuidance.CORRECTED_MAJOR_CHRONOLOGICAL_SOCIAL
    return MilestoneGuidance.TRANSITION_TO_CHRONOLOGICAL


def term_status(pma_days: int, config: AgePolicyConfig | None = None) -> TermStatus:
    term_days = (config or get_policy_config()).term_days
    if pma_days < term_days:
        remaining = term_days - pma_days
        return TermStatus(TermStatusKind.PRE_TERM, remaining, days_to_weeks_and_days(remaining))
    elapsed = pma_days - term_days
    return TermStatus(TermStatusKind.TERM_EQUIVALENT, elapsed, days_to_weeks_and_days(elapsed))


def recommendations(
    pna_days: int,
    corrected_days: int,
    completed_weeks: int,
    config: AgePolicyConfig | None = None,
) -> list[Recommendation]:
    """Follow-up recommendations, in display order."""
    policy = config or get_policy_config()
    thresholds = policy.prematurity.thresholds
    one_year = policy.developmental_stages["mobile_infant"]
    result: list[Recommendation] = []

    if pna_days > policy.advisories.older_child_years * 365:
        result.append(Recommendation.TRANSITION_TO_CHRONOLOGICAL)
    if completed_weeks < thresholds["extremely_preterm"]:
        result.append(Recommendation.NEURODEVELOPMENTAL_FOLLOW_UP)
    if corrected_days < 0:
        result.append(Recommendation.BEFORE_DUE_DATE)
    elif corrected_days < one_year:
        result.append(Recommendation.USE_CORRECTED_FIRST_YEAR)
    if completed_weeks < thresholds["very_preterm"] and pna_days < one_year:
        result.append(Recommendation.VERY_PRETERM_FOLLOW_UP)
    return result


def generate_insights(
    completed_weeks: int,
    pna_days: int,
    pma_days: int,
    corrected_days: int,
    config: AgePolicyConfig | None = None,
) -> Insights:
    policy = config or get_policy_config()
    return Insights(
        prematurity_level=classify_prematurity(completed_weeks, policy),
        developmental_stage=developmental_stage(corrected_days, policy),
        correction_relevance=correction_relevance(pna_days, completed_weeks, policy),
        milestone_guidance=milestone_guidance(corrected_days, completed_weeks, policy),
        term_status=term_status(pma_days, policy),
        recommendations=recommendations(pna_days, corrected_days, completed_weeks, policy),
    )


# ---------------------------------------------------------------------------
# Advisories
# ---------------------------------------------------------------------------


def collect_advisories(
    inputs: CalculatorInputs,
    pna_days: int,
    corrected_days: int,
    today: date,
    config: AgePolicyConfig | None = None,
) -> list[Advisory]:
    """Collect advisories for already-validated input.

    ``corrected_days`` is the offset-adjusted age regardless of whether the
    caller chose to apply correction, so that a very negative corrected age
    is flagged even when correction is switched off.
    """
    policy = config or get_policy_config()
    adv = policy.advisories
    thresholds = policy.prematurity.thresholds
    weeks = inputs.ga_birth.weeks
    result: list[Advisory] = []

    if inputs.birth_date < add_months(today, -12 * adv.birth_years_ago):
        result.append(Advisory.BIRTH_LONG_AGO)
    if days_between(inputs.birth_date, today) < adv.young_infant_weeks * 7:
        result.append(Advisory.YOUNG_INFANT)

    if weeks < thresholds["periviable"]:
        result.append(Advisory.GA_PERIVIABLE)
    elif weeks < thresholds["extremely_preterm"]:
        result.append(Advisory.GA_EXTREMELY_PRETERM)
    elif weeks < thresholds["very_preterm"]:
        result.append(Advisory.GA_VERY_PRETERM)
    elif weeks >= policy.prematurity.post_term_above_weeks:
        result.append(Advisory.GA_POST_TERM)

    if inputs.assessment_date > today:
        result.append(Advisory.ASSESSMENT_IN_FUTURE)
    if pna_days > adv.older_child_years * 365:
        result.append(Advisory.OLDER_CHILD)
    if weeks >= policy.prematurity.premature_below_weeks and pna_days < adv.term_newborn_days:
        result.append(Advisory.TERM_NEWBORN)
    if corrected_days < adv.very_negative_corrected_days:
        result.append(Advisory.VERY_NEGATIVE_CORRECTED_AGE)
    if weeks < thresholds["extremely_preterm"] and pna_days < adv.preterm_first_week_days:
        result.append(Advisory.PRETERM_FIRST_WEEK)
    return result
