"""Infant age engine.

Computes postnatal age, postmenstrual age and corrected (adjusted) age from
a birth date, an assessment date and the gestational age at birth.

Core modules:
    base          — Value types, age records and the InvalidInput error
    dates         — Calendar-day normalization and calendar breakdowns
    conversions   — Gestational age / weeks+days conversions
    calculator    — Age formulas, result aggregation, AgeCalculator
    validation    — Pydantic input schemas and policy checks
    insights      — Prematurity classification, guidance, advisories
    labels        — Display text for engine enums
    config_loader — Load/validate/hot-reload age_policy.yaml
"""

from src.infant_age.base import (
    AgeKind,
    CalculatorInputs,
    CalendarBreakdown,
    CorrectedAge,
    GestationalAge,
    InvalidInput,
    PostmenstrualAge,
    PostnatalAge,
    ResultMetadata,
    WeeksDays,
)
from src.infant_age.calculator import AgeCalculator, CalculatorResults, compute_calculator_results
from src.infant_age.config_loader import AgePolicyConfig, get_policy_config

__all__ = [
    "AgeCalculator",
    "AgeKind",
    "AgePolicyConfig",
    "CalculatorInputs",
    "CalculatorResults",
    "CalendarBreakdown",
    "CorrectedAge",
    "GestationalAge",
    "InvalidInput",
    "PostmenstrualAge",
    "PostnatalAge",
    "ResultMetadata",
    "WeeksDays",
    "compute_calculator_results",
    "get_policy_config",
]
