"""
Scoring utilities for PageAudit
Clamping, weighted aggregation, letter grading and compliance classification
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from .config import ComplianceThresholds, GradeBands

LEVEL_BANDS = (
    (90, "excellent"),
    (80, "good"),
    (70, "fair"),
    (60, "poor"),
    (0, "critical"),
)


def round_half_up(value: float) -> int:
    """Round like a score display would: 59.5 -> 60, not banker's rounding."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return low
    return max(low, min(high, float(value)))


def weighted_mean(pairs: Iterable[Tuple[float, float]]) -> Optional[float]:
    """Weighted mean of (value, weight) pairs; None when the total weight is 0."""
    total_weight = 0.0
    weighted_sum = 0.0
    for value, weight in pairs:
        if weight <= 0:
            continue
        weighted_sum += value * weight
        total_weight += weight
    if total_weight <= 0:
        return None
    return weighted_sum / total_weight


def category_score(weighted_outcomes: Iterable[Tuple[float, bool]]) -> int:
    """Weight-normalized percentage of passed rules, rounded.

    Returns 0 when nothing executed; callers decide whether such a category
    takes part in any further averaging.
    """
    outcomes = list(weighted_outcomes)
    total = sum(weight for weight, _ in outcomes)
    if total <= 0:
        return 0
    passed = sum(weight for weight, ok in outcomes if ok)
    return round_half_up(100.0 * passed / total)


def calculate_grade(score: float, bands: Optional[GradeBands] = None) -> str:
    """Map a 0-100 score to its letter band. Scores outside the range are clamped."""
    bands = bands or GradeBands()
    value = clamp_score(score)
    for minimum, letter in bands.bands:
        if value >= minimum:
            return letter
    return bands.bands[-1][1]


def grade_rank(grade: str, bands: Optional[GradeBands] = None) -> int:
    """Ordinal of a grade, higher is better; -1 for unknown letters."""
    bands = bands or GradeBands()
    letters = [letter for _, letter in reversed(bands.bands)]
    return letters.index(grade) if grade in letters else -1


def classify_compliance(score: float, thresholds: Optional[ComplianceThresholds] = None) -> str:
    thresholds = thresholds or ComplianceThresholds()
    if score >= thresholds.compliant_min:
        return "compliant"
    if score >= thresholds.partial_min:
        return "partial"
    return "non_compliant"


def calculate_level(score: float) -> str:
    for minimum, level in LEVEL_BANDS:
        if score >= minimum:
            return level
    return "critical"
