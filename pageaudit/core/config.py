"""
Configuration for PageAudit
Typed per-component configuration with documented defaults, YAML loading and
override merging
"""

from __future__ import annotations

import copy
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .model import EFFORT_LEVELS, IMPACT_LEVELS

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when configuration cannot be resolved or fails validation."""


DEFAULT_GRADE_BANDS: Tuple[Tuple[float, str], ...] = (
    (95, "A+"),
    (90, "A"),
    (85, "A-"),
    (80, "B+"),
    (75, "B"),
    (70, "B-"),
    (65, "C+"),
    (60, "C"),
    (55, "C-"),
    (50, "D"),
    (0, "F"),
)

DEFAULT_IMPACT_WEIGHTS = {"low": 1.0, "medium": 2.0, "high": 3.0}
DEFAULT_EFFORT_WEIGHTS = {"low": 1.0, "medium": 2.0, "high": 3.0}


def _check_timeout(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number of seconds or None, got {value!r}")


def _check_names(name: str, value: Optional[List[str]]) -> None:
    if value is None:
        return
    if isinstance(value, str) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"{name} must be a list of names")


@dataclass
class PhaseConfig:
    """Per-phase execution settings.

    Timeouts are per unit, in seconds; None leaves the unit unbounded.
    `enabled_*` set to None means every unit the profile provides.
    """

    detector_timeout: Optional[float] = 30.0
    heuristic_timeout: Optional[float] = 30.0
    enhancement_timeout: Optional[float] = 15.0
    enabled_detectors: Optional[List[str]] = None
    enabled_heuristics: Optional[List[str]] = None
    enabled_categories: Optional[List[str]] = None
    enable_enhancement: bool = True
    detector_options: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    heuristic_options: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_timeout("detector_timeout", self.detector_timeout)
        _check_timeout("heuristic_timeout", self.heuristic_timeout)
        _check_timeout("enhancement_timeout", self.enhancement_timeout)
        _check_names("enabled_detectors", self.enabled_detectors)
        _check_names("enabled_heuristics", self.enabled_heuristics)
        _check_names("enabled_categories", self.enabled_categories)
        for option_name in ("detector_options", "heuristic_options"):
            options = getattr(self, option_name)
            if not isinstance(options, Mapping) or not all(isinstance(v, Mapping) for v in options.values()):
                raise ConfigurationError(f"{option_name} must map unit names to option mappings")


@dataclass
class GradeBands:
    """Ordered (minimum score, letter) bands, highest first, last band anchored at 0."""

    bands: List[Tuple[float, str]] = field(default_factory=lambda: list(DEFAULT_GRADE_BANDS))

    def __post_init__(self) -> None:
        try:
            self.bands = [(float(minimum), str(letter)) for minimum, letter in self.bands]
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Grade bands must be (min_score, letter) pairs: {e}") from e
        if not self.bands:
            raise ConfigurationError("At least one grade band is required")
        minimums = [minimum for minimum, _ in self.bands]
        if any(b >= a for a, b in zip(minimums, minimums[1:])):
            raise ConfigurationError("Grade bands must be strictly descending by minimum score")
        if minimums[0] > 100:
            raise ConfigurationError("Grade band minimums must not exceed 100")
        if minimums[-1] != 0:
            raise ConfigurationError("The lowest grade band must start at 0 so every score is graded")
        letters = [letter for _, letter in self.bands]
        if len(set(letters)) != len(letters):
            raise ConfigurationError("Grade letters must be unique")


@dataclass
class ComplianceThresholds:
    compliant_min: float = 90.0
    partial_min: float = 70.0

    def __post_init__(self) -> None:
        if not 0 <= self.partial_min <= self.compliant_min <= 100:
            raise ConfigurationError(
                "Compliance thresholds must satisfy 0 <= partial_min <= compliant_min <= 100"
            )


@dataclass
class RulesEngineConfig:
    """Static configuration of the rules engine.

    `category_weights` need not sum to 1; the engine normalizes over the
    categories that actually executed rules.
    """

    category_weights: Dict[str, float] = field(default_factory=dict)
    default_category_weight: float = 0.1
    effort_table: Dict[str, str] = field(default_factory=dict)
    score_gain_table: Dict[str, float] = field(default_factory=dict)
    impact_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_IMPACT_WEIGHTS))
    effort_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_EFFORT_WEIGHTS))
    grade_bands: GradeBands = field(default_factory=GradeBands)
    compliance: ComplianceThresholds = field(default_factory=ComplianceThresholds)
    custom_rules: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.grade_bands, (list, tuple)):
            self.grade_bands = GradeBands(bands=list(self.grade_bands))
        if isinstance(self.compliance, Mapping):
            self.compliance = ComplianceThresholds(**self.compliance)
        for name, weight in self.category_weights.items():
            if not isinstance(weight, (int, float)) or weight < 0:
                raise ConfigurationError(f"Category weight for {name} must be a non-negative number")
        if self.default_category_weight < 0:
            raise ConfigurationError("default_category_weight must be non-negative")
        for rule, effort in self.effort_table.items():
            if effort not in EFFORT_LEVELS:
                raise ConfigurationError(f"Effort for {rule} must be one of {EFFORT_LEVELS}, got {effort!r}")
        for table_name, levels in (("impact_weights", IMPACT_LEVELS), ("effort_weights", EFFORT_LEVELS)):
            table = getattr(self, table_name)
            missing = [level for level in levels if level not in table]
            if missing:
                raise ConfigurationError(f"{table_name} is missing levels: {missing}")
            if any(table[level] <= 0 for level in levels):
                raise ConfigurationError(f"{table_name} values must be positive")

    def category_weight(self, category: str) -> float:
        return float(self.category_weights.get(category, self.default_category_weight))


@dataclass
class CombineConfig:
    insight_positive_min: float = 85.0
    insight_improvement_below: float = 60.0
    recommendation_below: float = 75.0

    def __post_init__(self) -> None:
        for name in ("insight_positive_min", "insight_improvement_below", "recommendation_below"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be within [0, 100]")


@dataclass
class CacheConfig:
    """Result cache eviction settings: `none`, `ttl` or `lru`."""

    policy: str = "none"
    ttl_seconds: float = 3600.0
    max_entries: int = 128

    def __post_init__(self) -> None:
        if self.policy not in ("none", "ttl", "lru"):
            raise ConfigurationError(f"Unknown cache policy {self.policy!r}")
        if self.ttl_seconds <= 0:
            raise ConfigurationError("ttl_seconds must be positive")
        if self.max_entries < 1:
            raise ConfigurationError("max_entries must be at least 1")


@dataclass
class EnhancementConfig:
    confidence_threshold: float = 0.7
    rules_weight: float = 0.5

    def __post_init__(self) -> None:
        if not 0 <= self.confidence_threshold <= 1:
            raise ConfigurationError("confidence_threshold must be within [0, 1]")
        if not 0 <= self.rules_weight <= 1:
            raise ConfigurationError("rules_weight must be within [0, 1]")


_NESTED = {
    "phases": PhaseConfig,
    "rules": RulesEngineConfig,
    "combine": CombineConfig,
    "cache": CacheConfig,
    "enhancement": EnhancementConfig,
}


@dataclass
class AnalyzerConfig:
    """Complete configuration of one analyzer run."""

    profile: str = "content"
    phases: PhaseConfig = field(default_factory=PhaseConfig)
    rules: RulesEngineConfig = field(default_factory=RulesEngineConfig)
    combine: CombineConfig = field(default_factory=CombineConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "AnalyzerConfig":
        """Build a config from a nested mapping, validating every section."""
        return cls().resolve(data)

    def resolve(self, overrides: Optional[Mapping[str, Any]]) -> "AnalyzerConfig":
        """Return a new config with `overrides` merged over this one."""
        if not overrides:
            return copy.deepcopy(self)
        if not isinstance(overrides, Mapping):
            raise ConfigurationError("Configuration overrides must be a mapping")

        merged = self.to_dict()
        for key, value in overrides.items():
            if key not in merged:
                raise ConfigurationError(f"Unknown configuration section: {key}")
            if key in _NESTED:
                if not isinstance(value, Mapping):
                    raise ConfigurationError(f"Configuration section {key} must be a mapping")
                allowed = {f.name for f in fields(_NESTED[key])}
                unknown = set(value) - allowed
                if unknown:
                    raise ConfigurationError(f"Unknown keys in {key}: {sorted(unknown)}")
                merged[key].update(value)
            else:
                merged[key] = value

        try:
            return AnalyzerConfig(
                profile=str(merged["profile"]),
                **{name: section(**merged[name]) for name, section in _NESTED.items()},
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # GradeBands/ComplianceThresholds flatten to plain values for re-merging
        data["rules"]["grade_bands"] = [list(band) for band in self.rules.grade_bands.bands]
        return data


def load_config(path: str) -> AnalyzerConfig:
    """Load an `AnalyzerConfig` from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")

    logger.info(f"Loaded configuration from {config_path}")
    return AnalyzerConfig.from_mapping(data)
