"""Input contract for the age calculator.

Raw input (a form payload, query-string mapping, or keyword arguments) is
parsed with Pydantic for shape and type, then checked against the age
policy.  Validation is all-or-nothing: either a fully valid
``CalculatorInputs`` comes back or ``InvalidInput`` is raised and nothing is
calculated.

Keys are accepted in snake_case or camelCase (``birth_date`` / ``birthDate``).
Error field identifiers are always dotted snake_case (``ga_birth.days``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel, to_snake

from src.infant_age.base import CalculatorInputs, GestationalAge, InvalidInput
from src.infant_age.config_loader import AgePolicyConfig, get_policy_config
from src.infant_age.dates import add_days, days_between, to_canonical_day

logger = logging.getLogger("infant_age.validation")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class InfantAgeBase(BaseModel):
    """Base model with shared config for calculator schemas."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )


class GestationalAgeSchema(InfantAgeBase):
    weeks: int = Field(ge=0)
    days: int = Field(default=0, ge=0, le=6)

    @field_validator("weeks", "days", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("expected a whole number, got a boolean")
        return value


class CalculatorInputsSchema(InfantAgeBase):
    birth_date: date
    assessment_date: date | None = None  # defaults to today
    ga_birth: GestationalAgeSchema
    use_correction: bool = True

    @field_validator("birth_date", "assessment_date", mode="before")
    @classmethod
    def _canonical_day(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return None
        try:
            return to_canonical_day(value, info.field_name)
        except InvalidInput as exc:
            raise ValueError(exc.message) from exc


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _field_id(loc: tuple) -> str:
    return ".".join(to_snake(str(part)) for part in loc if not isinstance(part, int))


def _first_error(exc: ValidationError) -> InvalidInput:
    err = exc.errors()[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    message = str(ctx_error) if ctx_error is not None else err["msg"]
    return InvalidInput(_field_id(err["loc"]) or "inputs", message)


def parse_inputs(raw: Mapping[str, Any] | CalculatorInputsSchema) -> CalculatorInputsSchema:
    """Parse raw input into a schema instance.

    Raises:
        InvalidInput: On the first structural problem (missing field, wrong
                      type, GA days outside 0–6, malformed date).
    """
    if isinstance(raw, CalculatorInputsSchema):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidInput("inputs", f"expected a mapping, got {type(raw).__name__}")
    try:
        return CalculatorInputsSchema.model_validate(dict(raw))
    except ValidationError as exc:
        raise _first_error(exc) from exc


def check_policy(
    schema: CalculatorInputsSchema,
    today: date,
    config: AgePolicyConfig | None = None,
) -> CalculatorInputs:
    """Apply the policy rules to structurally valid input.

    Raises:
        InvalidInput: If the birth date is in the future, the gestational
                      weeks fall outside the supported range, or the
                      assessment date is before birth or too far ahead.
    """
    policy = config or get_policy_config()
    ga_range = policy.gestational_age
    window = policy.assessment

    birth = schema.birth_date
    assessment = schema.assessment_date or today

    if birth > today:
        raise InvalidInput("birth_date", "birth date cannot be in the future")

    weeks = schema.ga_birth.weeks
    if not ga_range.min_weeks <= weeks <= ga_range.max_weeks:
        raise InvalidInput(
            "ga_birth.weeks",
            f"gestational weeks must be between {ga_range.min_weeks} and {ga_range.max_weeks}",
        )

    if assessment < birth:
        raise InvalidInput("assessment_date", "assessment date must be on or after birth date")
    if assessment > add_days(today, window.max_days_in_future):
        raise InvalidInput(
            "assessment_date",
            f"assessment date cannot be more than {window.max_days_in_future} days in the future",
        )
    if days_between(birth, assessment) > window.max_days_after_birth:
        raise InvalidInput(
            "assessment_date",
            f"assessment date must be within {window.max_years_after_birth} years of birth date",
        )

    return CalculatorInputs(
        birth_date=birth,
        assessment_date=assessment,
        ga_birth=GestationalAge(weeks=weeks, days=schema.ga_birth.days),
        use_correction=schema.use_correction,
    )


def validate_inputs(
    raw: Mapping[str, Any] | CalculatorInputsSchema,
    today: date | None = None,
    config: AgePolicyConfig | None = None,
) -> CalculatorInputs:
    """Validate raw calculator input end to end.

    Args:
        raw:    Mapping or schema instance.
        today:  Reference "now" for future-date checks (defaults to today).
        config: Policy override (defaults to the global age policy).

    Returns:
        Validated, immutable CalculatorInputs.

    Raises:
        InvalidInput: On the first violation found.
    """
    today = to_canonical_day(today or date.today())
    try:
        return check_policy(parse_inputs(raw), today, config)
    except InvalidInput as exc:
        logger.info("Rejected calculator input on field %s", exc.field)
        raise
