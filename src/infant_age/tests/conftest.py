"""Shared fixtures and constants for the infant age engine test suite."""

from __future__ import annotations

from datetime import date

import pytest

from src.config import get_settings
from src.infant_age import config_loader
from src.infant_age.base import CalculatorInputs, GestationalAge
from src.infant_age.calculator import AgeCalculator
from src.infant_age.config_loader import AgePolicyConfig, load_policy_config

# Fixed reference "today" so future-date checks never depend on the clock
TODAY = date(2024, 12, 1)

# Birth date used by the reference scenarios
BIRTH = date(2024, 1, 15)


def make_inputs(
    assessment: date,
    weeks: int,
    days: int = 0,
    birth: date = BIRTH,
    use_correction: bool = True,
) -> CalculatorInputs:
    return CalculatorInputs(
        birth_date=birth,
        assessment_date=assessment,
        ga_birth=GestationalAge(weeks=weeks, days=days),
        use_correction=use_correction,
    )


def raw_inputs(
    assessment: str | None = "2024-03-11",
    weeks: int = 28,
    days: int = 0,
    birth: str = "2024-01-15",
    **extra,
) -> dict:
    raw = {
        "birth_date": birth,
        "ga_birth": {"weeks": weeks, "days": days},
        **extra,
    }
    if assessment is not None:
        raw["assessment_date"] = assessment
    return raw


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def policy() -> AgePolicyConfig:
    """Load the bundled age policy."""
    return load_policy_config(config_loader._POLICY_PATH)


@pytest.fixture
def calculator(policy: AgePolicyConfig) -> AgeCalculator:
    return AgeCalculator(policy)


@pytest.fixture
def isolated_policy(monkeypatch: pytest.MonkeyPatch):
    """Let a test replace the global policy singleton; restored afterwards."""
    monkeypatch.setattr(config_loader, "_config", None)
    yield
    get_settings.cache_clear()


@pytest.fixture
def clear_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
