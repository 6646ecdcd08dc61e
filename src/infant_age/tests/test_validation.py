"""Tests for the calculator input contract."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

import pytest

from src.infant_age.base import GestationalAge, InvalidInput
from src.infant_age.config_loader import AgePolicyConfig, GestationalAgeRange
from src.infant_age.validation import (
    CalculatorInputsSchema,
    parse_inputs,
    validate_inputs,
)
from src.infant_age.tests.conftest import TODAY, raw_inputs


def _field_of(raw, policy: AgePolicyConfig, today: date = TODAY) -> str:
    with pytest.raises(InvalidInput) as exc_info:
        validate_inputs(raw, today=today, config=policy)
    return exc_info.value.field


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_snake_case_keys(self, policy: AgePolicyConfig) -> None:
        inputs = validate_inputs(raw_inputs(), today=TODAY, config=policy)
        assert inputs.birth_date == date(2024, 1, 15)
        assert inputs.assessment_date == date(2024, 3, 11)
        assert inputs.ga_birth == GestationalAge(28, 0)
        assert inputs.use_correction is True

    def test_camel_case_keys(self, policy: AgePolicyConfig) -> None:
        raw = {
            "birthDate": "2024-01-15",
            "assessmentDate": "2024-02-12",
            "gaBirth": {"weeks": 40, "days": 0},
            "useCorrection": False,
        }
        inputs = validate_inputs(raw, today=TODAY, config=policy)
        assert inputs.assessment_date == date(2024, 2, 12)
        assert inputs.use_correction is False

    def test_datetime_values_normalized(self, policy: AgePolicyConfig) -> None:
        raw = raw_inputs()
        raw["birth_date"] = datetime(2024, 1, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        raw["assessment_date"] = date(2024, 3, 11)
        inputs = validate_inputs(raw, today=TODAY, config=policy)
        assert inputs.birth_date == date(2024, 1, 16)

    def test_schema_instance_accepted(self, policy: AgePolicyConfig) -> None:
        schema = CalculatorInputsSchema.model_validate(raw_inputs())
        assert parse_inputs(schema) is schema
        assert validate_inputs(schema, today=TODAY, config=policy).ga_birth.weeks == 28

    def test_missing_assessment_defaults_to_today(self, policy: AgePolicyConfig) -> None:
        inputs = validate_inputs(raw_inputs(assessment=None), today=TODAY, config=policy)
        assert inputs.assessment_date == TODAY

    def test_numeric_strings_coerced(self, policy: AgePolicyConfig) -> None:
        raw = raw_inputs()
        raw["ga_birth"] = {"weeks": "32", "days": "4"}
        assert validate_inputs(raw, today=TODAY, config=policy).ga_birth == GestationalAge(32, 4)

    def test_not_a_mapping(self, policy: AgePolicyConfig) -> None:
        assert _field_of(["2024-01-15"], policy) == "inputs"


# ---------------------------------------------------------------------------
# Field-level errors
# ---------------------------------------------------------------------------


class TestFieldErrors:
    def test_missing_birth_date(self, policy: AgePolicyConfig) -> None:
        raw = raw_inputs()
        del raw["birth_date"]
        assert _field_of(raw, policy) == "birth_date"

    def test_malformed_birth_date(self, policy: AgePolicyConfig) -> None:
        with pytest.raises(InvalidInput, match="not a valid") as exc_info:
            validate_inputs(raw_inputs(birth="2024-02-30"), today=TODAY, config=policy)
        assert exc_info.value.field == "birth_date"

    def test_malformed_assessment_date(self, policy: AgePolicyConfig) -> None:
        assert _field_of(raw_inputs(assessment="soon"), policy) == "assessment_date"

    def test_missing_gestational_age(self, policy: AgePolicyConfig) -> None:
        raw = raw_inputs()
        del raw["ga_birth"]
        assert _field_of(raw, policy) == "ga_birth"

    def test_non_numeric_weeks(self, policy: AgePolicyConfig) -> None:
        raw = raw_inputs()
        raw["ga_birth"] = {"weeks": "abc", "days": 0}
        assert _field_of(raw, policy) == "ga_birth.weeks"

    @pytest.mark.parametrize("days", [-1, 7])
    def test_days_out_of_range(self, policy: AgePolicyConfig, days: int) -> None:
        assert _field_of(raw_inputs(weeks=40, days=days), policy) == "ga_birth.days"

    @pytest.mark.parametrize("part", ["weeks", "days"])
    def test_boolean_gestational_age_rejected(self, policy: AgePolicyConfig, part: str) -> None:
        raw = raw_inputs(weeks=30)
        raw["ga_birth"][part] = True
        with pytest.raises(InvalidInput, match="boolean") as exc_info:
            validate_inputs(raw, today=TODAY, config=policy)
        assert exc_info.value.field == f"ga_birth.{part}"

    def test_birth_in_future(self, policy: AgePolicyConfig) -> None:
        tomorrow = (TODAY + timedelta(days=1)).isoformat()
        assert _field_of(raw_inputs(birth=tomorrow, assessment=tomorrow), policy) == "birth_date"

    def test_birth_today_accepted(self, policy: AgePolicyConfig) -> None:
        iso = TODAY.isoformat()
        inputs = validate_inputs(raw_inputs(birth=iso, assessment=iso), today=TODAY, config=policy)
        assert inputs.birth_date == TODAY

    def test_assessment_before_birth(self, policy: AgePolicyConfig) -> None:
        assert _field_of(raw_inputs(assessment="2024-01-14"), policy) == "assessment_date"

    def test_rejection_is_logged(
        self, policy: AgePolicyConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="infant_age.validation"):
            with pytest.raises(InvalidInput):
                validate_inputs(raw_inputs(assessment="2024-01-14"), today=TODAY, config=policy)
        assert "assessment_date" in caplog.text
        assert "2024-01-14" not in caplog.text


# ---------------------------------------------------------------------------
# Policy limits
# ---------------------------------------------------------------------------


class TestGestationalRange:
    @pytest.mark.parametrize("weeks", [22, 30, 42])
    def test_boundaries_accepted(self, policy: AgePolicyConfig, weeks: int) -> None:
        inputs = validate_inputs(raw_inputs(weeks=weeks), today=TODAY, config=policy)
        assert inputs.ga_birth.weeks == weeks

    def test_upper_boundary_with_days_accepted(self, policy: AgePolicyConfig) -> None:
        inputs = validate_inputs(raw_inputs(weeks=42, days=6), today=TODAY, config=policy)
        assert inputs.ga_birth.total_days == 300

    @pytest.mark.parametrize("weeks", [21, 43])
    def test_one_beyond_rejected(self, policy: AgePolicyConfig, weeks: int) -> None:
        with pytest.raises(InvalidInput, match="between 22 and 42") as exc_info:
            validate_inputs(raw_inputs(weeks=weeks), today=TODAY, config=policy)
        assert exc_info.value.field == "ga_birth.weeks"

    def test_wider_policy_accepts_periviable(self) -> None:
        wide = AgePolicyConfig(gestational_age=GestationalAgeRange(min_weeks=20, max_weeks=44))
        inputs = validate_inputs(raw_inputs(weeks=20), today=TODAY, config=wide)
        assert inputs.ga_birth.weeks == 20


class TestAssessmentWindow:
    def test_one_year_ahead_accepted(self, policy: AgePolicyConfig) -> None:
        limit = (TODAY + timedelta(days=365)).isoformat()
        inputs = validate_inputs(raw_inputs(assessment=limit), today=TODAY, config=policy)
        assert inputs.assessment_date == TODAY + timedelta(days=365)

    def test_beyond_one_year_ahead_rejected(self, policy: AgePolicyConfig) -> None:
        too_far = (TODAY + timedelta(days=366)).isoformat()
        assert _field_of(raw_inputs(assessment=too_far), policy) == "assessment_date"

    def test_ten_years_after_birth(self, policy: AgePolicyConfig) -> None:
        birth = date(2015, 1, 1)
        ok = raw_inputs(birth=birth.isoformat(), assessment=(birth + timedelta(days=3650)).isoformat())
        assert validate_inputs(ok, today=TODAY, config=policy).birth_date == birth

        late = raw_inputs(
            birth=birth.isoformat(), assessment=(birth + timedelta(days=3651)).isoformat()
        )
        with pytest.raises(InvalidInput, match="within 10 years") as exc_info:
            validate_inputs(late, today=TODAY, config=policy)
        assert exc_info.value.field == "assessment_date"

    def test_error_serializes(self, policy: AgePolicyConfig) -> None:
        with pytest.raises(InvalidInput) as exc_info:
            validate_inputs(raw_inputs(assessment="2024-01-14"), today=TODAY, config=policy)
        data = exc_info.value.to_dict()
        assert data["field"] == "assessment_date"
        assert "on or after" in data["message"]
        assert str(exc_info.value).startswith("assessment_date: ")
