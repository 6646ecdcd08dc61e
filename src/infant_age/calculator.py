"""Postnatal, postmenstrual and corrected age calculation.

Formulas (term = 40 weeks = 280 days by default):
    PNA        = assessment_date - birth_date                (calendar days)
    PMA        = GA_days + PNA
    offset     = max(0, term_days - GA_days)                 (0 if disabled)
    CA         = PNA - offset                                (may be negative)

A negative corrected age means the infant has not yet reached the corrected
due date.  The value is kept as is; only the calendar breakdown, which has
no negative form, collapses to zero.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any

from src.infant_age.base import (
    CalculatorInputs,
    CorrectedAge,
    GestationalAge,
    InvalidInput,
    PostmenstrualAge,
    PostnatalAge,
    ResultMetadata,
)
from src.infant_age.config_loader import AgePolicyConfig, get_policy_config
from src.infant_age.conversions import days_to_weeks_and_days, gestational_age_to_days
from src.infant_age.dates import add_days, calendar_breakdown, days_between, to_canonical_day
from src.infant_age.insights import Advisory, Insights, collect_advisories, generate_insights
from src.infant_age.validation import CalculatorInputsSchema, validate_inputs

logger = logging.getLogger("infant_age.calculator")

DEFAULT_TERM_WEEKS = 40


# ---------------------------------------------------------------------------
# Day-count formulas
# ---------------------------------------------------------------------------


def calc_pna_days(birth_date: date, assessment_date: date) -> int:
    """Postnatal age in calendar days.

    Raises:
        InvalidInput: If the assessment date precedes the birth date.
    """
    pna = days_between(birth_date, assessment_date)
    if pna < 0:
        raise InvalidInput("assessment_date", "assessment date must be on or after birth date")
    return pna


def calc_pma_days(ga_days: int, pna_days: int) -> int:
    return ga_days + pna_days


def calc_correction_days(ga_days: int, term_weeks: int = DEFAULT_TERM_WEEKS) -> int:
    """Prematurity offset: days short of term at birth, never negative."""
    if term_weeks <= 0:
        raise ValueError(f"term_weeks must be positive, got {term_weeks}")
    return max(0, term_weeks * 7 - ga_days)


def calc_corrected_age_days(pna_days: int, correction_days: int) -> int:
    return pna_days - correction_days


# ---------------------------------------------------------------------------
# Age records
# ---------------------------------------------------------------------------


def postnatal_age(birth_date: date, assessment_date: date) -> PostnatalAge:
    pna_days = calc_pna_days(birth_date, assessment_date)
    return PostnatalAge(
        total_days=pna_days,
        weeks_days=days_to_weeks_and_days(pna_days),
        calendar=calendar_breakdown(birth_date, assessment_date),
    )


def postmenstrual_age(
    birth_date: date,
    ga_birth: GestationalAge,
    assessment_date: date,
    term_weeks: int = DEFAULT_TERM_WEEKS,
) -> PostmenstrualAge:
    ga_days = gestational_age_to_days(ga_birth)
    pma_days = calc_pma_days(ga_days, calc_pna_days(birth_date, assessment_date))
    term_days = term_weeks * 7
    return PostmenstrualAge(
        total_days=pma_days,
        weeks_days=days_to_weeks_and_days(pma_days),
        is_term_equivalent=pma_days >= term_days,
        days_to_term=max(0, term_days - pma_days),
        # Before birth for post-term infants
        term_equivalent_date=add_days(birth_date, term_days - ga_days),
    )


def corrected_age(
    birth_date: date,
    ga_birth: GestationalAge,
    assessment_date: date,
    use_correction: bool = True,
    term_weeks: int = DEFAULT_TERM_WEEKS,
) -> CorrectedAge:
    """Corrected age record.

    Args:
        birth_date:      Date of birth.
        ga_birth:        Gestational age at birth.
        assessment_date: Date the age is computed for.
        use_correction:  If False the offset is 0 and CA equals PNA.
        term_weeks:      Term reference in weeks.
    """
    pna_days = calc_pna_days(birth_date, assessment_date)
    ga_days = gestational_age_to_days(ga_birth)
    correction = calc_correction_days(ga_days, term_weeks) if use_correction else 0
    corrected_days = calc_corrected_age_days(pna_days, correction)
    corrected_birth = add_days(birth_date, correction)
    return CorrectedAge(
        total_days=corrected_days,
        weeks_days=days_to_weeks_and_days(corrected_days),
        calendar=calendar_breakdown(corrected_birth, assessment_date),
        correction_days=correction,
        is_negative=corrected_days < 0,
        corrected_birth_date=corrected_birth,
    )


# ---------------------------------------------------------------------------
# Aggregate result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalculatorResults:
    """Everything computed for one set of inputs.

    Attributes:
        inputs:        The validated inputs the results were computed from.
        postnatal:     Chronological age.
        postmenstrual: GA at birth + postnatal age.
        corrected:     Age adjusted for prematurity.
        metadata:      Prematurity flags and correction policy.
        insights:      Classification and guidance.
        advisories:    Non-blocking warnings (empty from the pure engine).
    """

    inputs: CalculatorInputs
    postnatal: PostnatalAge
    postmenstrual: PostmenstrualAge
    corrected: CorrectedAge
    metadata: ResultMetadata
    insights: Insights
    advisories: list[Advisory] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputs": self.inputs.to_dict(),
            "postnatal": self.postnatal.to_dict(),
            "postmenstrual": self.postmenstrual.to_dict(),
            "corrected": self.corrected.to_dict(),
            "metadata": self.metadata.to_dict(),
            "insights": self.insights.to_dict(),
            "advisories": [a.value for a in self.advisories],
        }


def compute_calculator_results(
    inputs: CalculatorInputs, config: AgePolicyConfig | None = None
) -> CalculatorResults:
    """Run the engine on validated inputs.

    Raises:
        InvalidInput: Only if ``inputs`` bypassed validation and the
                      assessment precedes birth or GA days are out of range.
    """
    policy = config or get_policy_config()
    ga = inputs.ga_birth
    term_weeks = policy.term_weeks

    pna = postnatal_age(inputs.birth_date, inputs.assessment_date)
    pma = postmenstrual_age(inputs.birth_date, ga, inputs.assessment_date, term_weeks)
    ca = corrected_age(
        inputs.birth_date, ga, inputs.assessment_date, inputs.use_correction, term_weeks
    )

    metadata = ResultMetadata(
        is_premature=ga.as_weeks < policy.prematurity.premature_below_weeks,
        is_correction_applied=inputs.use_correction and ca.correction_days > 0,
        correction_recommended_until_months=policy.correction_recommended_until_months,
        ga_birth_weeks=ga.as_weeks,
    )
    insights = generate_insights(
        completed_weeks=ga.weeks,
        pna_days=pna.total_days,
        pma_days=pma.total_days,
        corrected_days=ca.total_days,
        config=policy,
    )

    logger.debug(
        "Computed ages: pna=%d pma=%d ca=%d correction=%d",
        pna.total_days,
        pma.total_days,
        ca.total_days,
        ca.correction_days,
    )
    return CalculatorResults(
        inputs=inputs,
        postnatal=pna,
        postmenstrual=pma,
        corrected=ca,
        metadata=metadata,
        insights=insights,
    )


class AgeCalculator:
    """Validate raw input, compute all ages and attach advisories.

    Usage::

        calculator = AgeCalculator()
        results = calculator.calculate(
            {
                "birth_date": "2024-01-15",
                "assessment_date": "2024-03-11",
                "ga_birth": {"weeks": 28, "days": 0},
            }
        )
        results.corrected.total_days    # -28
    """

    def __init__(self, config: AgePolicyConfig | None = None) -> None:
        self._config = config or get_policy_config()

    @property
    def config(self) -> AgePolicyConfig:
        return self._config

    def calculate(
        self,
        raw: Mapping[str, Any] | CalculatorInputsSchema,
        today: date | None = None,
    ) -> CalculatorResults:
        """Validate and compute.

        Args:
            raw:   Raw input mapping or parsed schema.
            today: Reference date for future checks and advisories.

        Returns:
            CalculatorResults with advisories populated.

        Raises:
            InvalidInput: If the input violates the contract.  Nothing is
                          computed in that case.
        """
        today = to_canonical_day(today or date.today())
        inputs = validate_inputs(raw, today=today, config=self._config)
        results = compute_calculator_results(inputs, self._config)

        # Advisories look at the offset-adjusted age even with correction off
        ga_days = inputs.ga_birth.total_days
        offset = calc_correction_days(ga_days, self._config.term_weeks)
        advisories = collect_advisories(
            inputs,
            pna_days=results.postnatal.total_days,
            corrected_days=calc_corrected_age_days(results.postnatal.total_days, offset),
            today=today,
            config=self._config,
        )
        return replace(results, advisories=advisories)
