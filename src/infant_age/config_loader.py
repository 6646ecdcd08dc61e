"""Load, validate, and hot-reload the clinical age policy.

The policy lives in ``age_policy.yaml`` alongside this module, unless the
``AGE_POLICY_PATH`` setting points elsewhere.  It is loaded once and cached.
Call ``reload_policy_config()`` to re-read from disk.

Usage::

    from src.infant_age.config_loader import get_policy_config

    policy = get_policy_config()
    policy.term_days                      # 280
    policy.gestational_age.min_weeks      # 22
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from src.config import get_settings

logger = logging.getLogger("infant_age.config")

_POLICY_PATH = Path(__file__).parent / "age_policy.yaml"

_PREMATURITY_TIERS = (
    "periviable",
    "extremely_preterm",
    "very_preterm",
    "moderate_preterm",
    "late_preterm",
)
_STAGE_TIERS = ("newborn", "young_infant", "older_infant", "mobile_infant", "toddler")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GestationalAgeRange:
    """Accepted range of gestational weeks at birth (inclusive)."""

    min_weeks: int = 22
    max_weeks: int = 42


@dataclass(frozen=True)
class PrematurityConfig:
    """Prematurity classification thresholds in completed weeks.

    ``thresholds`` maps tier name -> exclusive upper bound, in ascending order.
    """

    premature_below_weeks: int = 37
    thresholds: dict[str, int] = field(
        default_factory=lambda: {
            "periviable": 24,
            "extremely_preterm": 28,
            "very_preterm": 32,
            "moderate_preterm": 34,
            "late_preterm": 37,
        }
    )
    post_term_above_weeks: int = 42


@dataclass(frozen=True)
class AssessmentWindow:
    """How far an assessment date may lie from today and from birth."""

    max_days_in_future: int = 365
    max_years_after_birth: int = 10

    @property
    def max_days_after_birth(self) -> int:
        return self.max_years_after_birth * 365


@dataclass(frozen=True)
class AdvisoryConfig:
    """Thresholds for non-blocking advisories over valid input."""

    birth_years_ago: int = 5
    young_infant_weeks: int = 20
    older_child_years: int = 3
    term_newborn_days: int = 14
    very_negative_corrected_days: int = -140
    preterm_first_week_days: int = 7


@dataclass(frozen=True)
class AgePolicyConfig:
    """Complete, validated age policy.

    Attributes:
        version:                             Policy schema version string.
        term_weeks:                          Term reference (40).
        gestational_age:                     Accepted GA range at birth.
        prematurity:                         Classification thresholds.
        correction_recommended_until_months: Window in which correction is used.
        assessment:                          Assessment date limits.
        developmental_stages:                Stage name -> exclusive upper bound
                                             in corrected days, ascending.
        advisories:                          Advisory thresholds.
    """

    version: str = "1.0"
    term_weeks: int = 40
    gestational_age: GestationalAgeRange = field(default_factory=GestationalAgeRange)
    prematurity: PrematurityConfig = field(default_factory=PrematurityConfig)
    correction_recommended_until_months: int = 24
    assessment: AssessmentWindow = field(default_factory=AssessmentWindow)
    developmental_stages: dict[str, int] = field(
        default_factory=lambda: {
            "newborn": 28,
            "young_infant": 84,
            "older_infant": 180,
            "mobile_infant": 365,
            "toddler": 730,
        }
    )
    advisories: AdvisoryConfig = field(default_factory=AdvisoryConfig)

    @property
    def term_days(self) -> int:
        return self.term_weeks * 7

    @property
    def correction_window_days(self) -> int:
        """Approximate correction window in days (24 months -> 730)."""
        return round(self.correction_recommended_until_months * 365 / 12)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when age_policy.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError:     If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    import yaml

    if not path.exists():
        raise FileNotFoundError(f"Age policy not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> AgePolicyConfig:
    """Validate the raw YAML dict and construct an AgePolicyConfig.

    Missing sections fall back to the defaults above.  Every problem found is
    collected and reported in a single error.

    Raises:
        ConfigValidationError: If the document or a section is not a mapping,
                               or any value is non-integral or inconsistent.
    """
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"age_policy.yaml must be a mapping at the top level, got {type(raw).__name__}"
        )

    errors: list[str] = []

    def _section(parent: dict, key: str, path: str) -> dict:
        value = parent.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            errors.append(f"{path} must be a mapping, got {value!r}")
            return {}
        return value

    def _int(section: dict, key: str, path: str, default: int) -> int:
        value = section.get(key, default)
        if isinstance(value, bool):
            pass
        elif isinstance(value, int):
            return value
        elif isinstance(value, float) and value.is_integer():
            return int(value)
        elif isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        errors.append(f"{path}.{key} must be an integer, got {value!r}")
        return default

    def _ascending(mapping: dict[str, int], path: str) -> None:
        bounds = list(mapping.values())
        if bounds != sorted(bounds) or len(set(bounds)) != len(bounds):
            errors.append(f"{path} must be strictly ascending, got {bounds}")

    version = str(raw.get("version", "1.0"))

    # ── Term ──
    term_weeks = _int(_section(raw, "term", "term"), "weeks", "term", 40)
    if term_weeks <= 0:
        errors.append(f"term.weeks must be positive, got {term_weeks}")

    # ── Gestational age range ──
    ga_raw = _section(raw, "gestational_age", "gestational_age")
    ga_range = GestationalAgeRange(
        min_weeks=_int(ga_raw, "min_weeks", "gestational_age", 22),
        max_weeks=_int(ga_raw, "max_weeks", "gestational_age", 42),
    )
    if ga_range.min_weeks < 0 or ga_range.min_weeks > ga_range.max_weeks:
        errors.append(
            f"gestational_age range [{ga_range.min_weeks}, {ga_range.max_weeks}] is invalid"
        )

    # ── Prematurity ──
    pm_raw = _section(raw, "prematurity", "prematurity")
    defaults = PrematurityConfig()
    th_raw = _section(pm_raw, "thresholds", "prematurity.thresholds")
    thresholds: dict[str, int] = {}
    for tier in _PREMATURITY_TIERS:
        thresholds[tier] = _int(th_raw, tier, "prematurity.thresholds", defaults.thresholds[tier])
    unknown = set(th_raw) - set(_PREMATURITY_TIERS)
    if unknown:
        errors.append(f"prematurity.thresholds has unknown tiers: {sorted(unknown)}")
    _ascending(thresholds, "prematurity.thresholds")
    prematurity = PrematurityConfig(
        premature_below_weeks=_int(pm_raw, "premature_below_weeks", "prematurity", 37),
        thresholds=thresholds,
        post_term_above_weeks=_int(pm_raw, "post_term_above_weeks", "prematurity", 42),
    )
    if prematurity.premature_below_weeks > term_weeks:
        logger.warning(
            "premature_below_weeks (%d) is above term (%d weeks)",
            prematurity.premature_below_weeks,
            term_weeks,
        )

    # ── Correction ──
    corr_raw = _section(raw, "correction", "correction")
    recommended_until = _int(corr_raw, "recommended_until_months", "correction", 24)

    # ── Assessment window ──
    as_raw = _section(raw, "assessment", "assessment")
    assessment = AssessmentWindow(
        max_days_in_future=_int(as_raw, "max_days_in_future", "assessment", 365),
        max_years_after_birth=_int(as_raw, "max_years_after_birth", "assessment", 10),
    )
    if assessment.max_days_in_future < 0 or assessment.max_years_after_birth <= 0:
        errors.append("assessment limits must be positive")

    # ── Developmental stages ──
    ds_raw = _section(raw, "developmental_stages", "developmental_stages")
    stage_defaults = AgePolicyConfig().developmental_stages
    stages = {
        name: _int(ds_raw, name, "developmental_stages", stage_defaults[name])
        for name in _STAGE_TIERS
    }
    _ascending(stages, "developmental_stages")

    # ── Advisories ──
    adv_raw = _section(raw, "advisories", "advisories")
    adv_defaults = AdvisoryConfig()
    advisories = AdvisoryConfig(
        **{
            key: _int(adv_raw, key, "advisories", getattr(adv_defaults, key))
            for key in adv_defaults.__dataclass_fields__
        }
    )

    if errors:
        raise ConfigValidationError(
            f"age_policy.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return AgePolicyConfig(
        version=version,
        term_weeks=term_weeks,
        gestational_age=ga_range,
        prematurity=prematurity,
        correction_recommended_until_months=recommended_until,
        assessment=assessment,
        developmental_stages=stages,
        advisories=advisories,
    )


def _default_path() -> Path:
    override = get_settings().age_policy_path
    return Path(override) if override else _POLICY_PATH


def load_policy_config(path: Path | None = None) -> AgePolicyConfig:
    """Load and validate the age policy from disk.

    Args:
        path: Override path to YAML.  Defaults to the ``AGE_POLICY_PATH``
              setting, then the bundled age_policy.yaml.
    """
    target = path or _default_path()
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded age policy v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: AgePolicyConfig | None = None
_config_lock = threading.Lock()


def get_policy_config() -> AgePolicyConfig:
    """Return the global AgePolicyConfig, loading it on first call.  Thread-safe."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_policy_config()
    return _config


def reload_policy_config(path: Path | None = None) -> AgePolicyConfig:
    """Reload the policy from disk and replace the global singleton.

    If validation fails, the old policy is retained and the error re-raised.
    """
    global _config
    new_config = load_policy_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded age policy: %s → %s", old_version, new_config.version)
    return new_config
