"""Helpers shared by heuristic plugins for reading the detection bundle."""

from typing import Any, Iterable, Mapping, Optional

from pageaudit.core.model import DetectionBundle


def detector_score(detection: DetectionBundle, name: str) -> Optional[float]:
    """Sub-score of a detector that succeeded, else None."""
    entry = detection.get(name)
    if entry is None or not entry.succeeded:
        return None
    return entry.sub_score


def detector_metric(detection: DetectionBundle, name: str, metric: str, default: Any = None) -> Any:
    entry = detection.get(name)
    if entry is None or not entry.succeeded:
        return default
    return entry.metrics.get(metric, default)


def prior_judgment(heuristics: Mapping[str, Any], name: str) -> Optional[Mapping[str, Any]]:
    """Judgment of an earlier heuristic in this run, if it ran and succeeded."""
    entry = heuristics.get(name)
    if entry is None or not entry.succeeded:
        return None
    return entry.judgment


def mean_of(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 1)


def label_for(score: Optional[float]) -> str:
    if score is None:
        return "unknown"
    if score >= 85:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "needs_improvement"
    return "poor"
