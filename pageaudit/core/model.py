"""
Core models for PageAudit

Defines the dataclasses shared by the orchestrator, the rules engine and the
detector/heuristic plugins.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

IMPACT_LEVELS = ("low", "medium", "high")
EFFORT_LEVELS = ("low", "medium", "high")
COMPLIANCE_STATUSES = ("compliant", "partial", "non_compliant")


def _normalize_level(value: Any, allowed: tuple, default: str) -> str:
    level = str(value or "").strip().lower()
    return level if level in allowed else default


@dataclass(frozen=True)
class AnalysisTarget:
    """Identifies what is being analyzed.

    `key` is the normalized identity used by the result cache; `raw` keeps the
    value the caller supplied for display.
    """

    key: str
    raw: str = ""

    def __str__(self) -> str:
        return self.key


@dataclass
class DetectorResult:
    """Value returned by a detector's `detect` coroutine."""

    score: float
    metrics: Dict[str, Any] = field(default_factory=dict)
    findings: List[Dict[str, Any]] = field(default_factory=list)
    success: bool = True


@dataclass
class HeuristicResult:
    """Value returned by a heuristic's `analyze` coroutine."""

    score: float
    judgment: Dict[str, Any] = field(default_factory=dict)
    success: bool = True


@dataclass(frozen=True)
class DetectionEntry:
    """One detector's slot inside the detection bundle."""

    name: str
    succeeded: bool
    sub_score: Optional[float] = None
    metrics: Mapping[str, Any] = field(default_factory=dict)
    findings: tuple = ()
    error: Optional[str] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.succeeded,
            "sub_score": self.sub_score,
            "metrics": dict(self.metrics),
            "findings": list(self.findings),
            "duration_ms": round(self.duration_ms, 3),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class HeuristicEntry:
    """One heuristic's slot inside the heuristic bundle."""

    name: str
    succeeded: bool
    sub_score: Optional[float] = None
    judgment: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.succeeded,
            "sub_score": self.sub_score,
            "judgment": dict(self.judgment),
            "duration_ms": round(self.duration_ms, 3),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


class DetectionBundle(Mapping):
    """Read-only mapping of detector name to `DetectionEntry`.

    Built once per run by the orchestrator and never mutated afterwards.
    """

    def __init__(self, entries: Mapping[str, DetectionEntry]):
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, name: str) -> DetectionEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def succeeded(self) -> List[str]:
        return [name for name, entry in self._entries.items() if entry.succeeded]

    @property
    def failed(self) -> List[str]:
        return [name for name, entry in self._entries.items() if not entry.succeeded]

    def summary(self) -> Dict[str, Any]:
        return {
            "total_detectors": len(self._entries),
            "successful_detectors": len(self.succeeded),
            "failed_detectors": len(self.failed),
            "total_execution_ms": round(sum(e.duration_ms for e in self._entries.values()), 3),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detectors": {name: entry.to_dict() for name, entry in self._entries.items()},
            "summary": self.summary(),
        }


class HeuristicBundle(Mapping):
    """Append-only mapping of heuristic name to `HeuristicEntry`.

    `view()` returns a frozen copy of the entries populated so far, which is
    what each heuristic receives: earlier heuristics are visible, later ones
    are absent.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, HeuristicEntry] = {}

    def append(self, entry: HeuristicEntry) -> None:
        if entry.name in self._entries:
            raise ValueError(f"Heuristic {entry.name} already recorded in this run")
        self._entries[entry.name] = entry

    def view(self) -> Mapping[str, HeuristicEntry]:
        return MappingProxyType(dict(self._entries))

    def __getitem__(self, name: str) -> HeuristicEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def failed(self) -> List[str]:
        return [name for name, entry in self._entries.items() if not entry.succeeded]

    def summary(self) -> Dict[str, Any]:
        failed = len(self.failed)
        return {
            "total_heuristics": len(self._entries),
            "successful_heuristics": len(self._entries) - failed,
            "failed_heuristics": failed,
            "total_execution_ms": round(sum(e.duration_ms for e in self._entries.values()), 3),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heuristics": {name: entry.to_dict() for name, entry in self._entries.items()},
            "summary": self.summary(),
        }


@dataclass(frozen=True)
class RuleVerdict:
    """Outcome of one rule evaluation."""

    rule: str
    passed: bool
    observed_value: Any = None
    threshold: Any = None
    impact: str = "low"
    category: str = ""
    weight: float = 1.0
    description: str = ""
    error: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "impact", _normalize_level(self.impact, IMPACT_LEVELS, "medium"))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.error is None:
            data.pop("error")
        return data


@dataclass
class RuleCategoryResult:
    """Aggregated verdicts of one rule category."""

    category: str
    verdicts: List[RuleVerdict] = field(default_factory=list)
    passed_count: int = 0
    failed_count: int = 0
    category_score: int = 0
    weight: float = 0.0

    @property
    def executed(self) -> int:
        return len(self.verdicts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "verdicts": [v.to_dict() for v in self.verdicts],
            "passed": self.passed_count,
            "failed": self.failed_count,
            "score": self.category_score,
            "weight": self.weight,
            "executed": self.executed,
        }


@dataclass(frozen=True)
class Opportunity:
    """A failed rule surfaced as a ranked improvement."""

    rule: str
    impact: str
    effort: str
    estimated_score_gain: float
    category: str = ""
    description: str = ""
    current_value: Any = None
    target_value: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "impact", _normalize_level(self.impact, IMPACT_LEVELS, "medium"))
        object.__setattr__(self, "effort", _normalize_level(self.effort, EFFORT_LEVELS, "medium"))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OverallAssessment:
    """Output of the rules engine."""

    overall_score: int = 0
    grade: str = "F"
    compliance_status: str = "non_compliant"
    level: str = "critical"
    categories: Dict[str, RuleCategoryResult] = field(default_factory=dict)
    opportunities: List[Opportunity] = field(default_factory=list)
    high_impact: List[Opportunity] = field(default_factory=list)
    quick_wins: List[Opportunity] = field(default_factory=list)
    long_term: List[Opportunity] = field(default_factory=list)
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    rules_executed: int = 0
    rules_passed: int = 0
    rules_failed: int = 0
    success: bool = True
    error: Optional[str] = None
    notes: List[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def category_scores(self) -> Dict[str, int]:
        return {
            name: result.category_score
            for name, result in self.categories.items()
            if result.executed > 0
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "overall_score": self.overall_score,
            "grade": self.grade,
            "compliance_status": self.compliance_status,
            "level": self.level,
            "categories": {name: c.to_dict() for name, c in self.categories.items()},
            "opportunities": [o.to_dict() for o in self.opportunities],
            "high_impact": [o.rule for o in self.high_impact],
            "quick_wins": [o.rule for o in self.quick_wins],
            "long_term": [o.rule for o in self.long_term],
            "recommendations": list(self.recommendations),
            "rules_executed": self.rules_executed,
            "rules_passed": self.rules_passed,
            "rules_failed": self.rules_failed,
            "notes": list(self.notes),
            "duration_ms": round(self.duration_ms, 3),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class EnhancementResult:
    """Value returned by an enhancer. `score`/`grade` override the combined result when set."""

    score: Optional[float] = None
    grade: Optional[str] = None
    confidence: float = 0.0
    insights: List[Dict[str, Any]] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 3)
        if self.error is None:
            data.pop("error")
        return data


@dataclass
class AnalysisReport:
    """Top-level artifact of one orchestrator run.

    A report with `success=False` is the reduced shape produced when the
    configure phase aborts: only `error` and `fallback` are meaningful.
    """

    target: AnalysisTarget
    success: bool = True
    analyzer: str = ""
    version: str = ""
    timestamp: str = ""
    execution_time_ms: float = 0.0
    configuration: Dict[str, Any] = field(default_factory=dict)
    detection: Optional[DetectionBundle] = None
    heuristics: Optional[HeuristicBundle] = None
    rules: Optional[OverallAssessment] = None
    enhancement: Optional[EnhancementResult] = None
    combined: Dict[str, Any] = field(default_factory=dict)
    insights: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    issues: List[Dict[str, Any]] = field(default_factory=list)
    inventory: Dict[str, Any] = field(default_factory=dict)
    performance: Dict[str, Any] = field(default_factory=dict)
    phase_durations_ms: Dict[str, float] = field(default_factory=dict)
    error: Optional[str] = None
    fallback: Dict[str, Any] = field(default_factory=dict)

    @property
    def overall_score(self) -> Optional[int]:
        overall = self.combined.get("overall") or {}
        return overall.get("score")

    @property
    def grade(self) -> Optional[str]:
        overall = self.combined.get("overall") or {}
        return overall.get("grade")

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "target": self.target.key,
                "analyzer": self.analyzer,
                "timestamp": self.timestamp,
                "error": self.error,
                "fallback": dict(self.fallback),
            }
        return {
            "success": True,
            "target": self.target.key,
            "analyzer": self.analyzer,
            "version": self.version,
            "timestamp": self.timestamp,
            "execution_time_ms": round(self.execution_time_ms, 3),
            "configuration": dict(self.configuration),
            "detection": self.detection.to_dict() if self.detection is not None else {},
            "heuristics": self.heuristics.to_dict() if self.heuristics is not None else {},
            "rules": self.rules.to_dict() if self.rules is not None else {},
            "enhancement": self.enhancement.to_dict() if self.enhancement is not None else None,
            "combined": self.combined,
            "insights": list(self.insights),
            "recommendations": list(self.recommendations),
            "issues": list(self.issues),
            "inventory": dict(self.inventory),
            "performance": dict(self.performance),
            "phase_durations_ms": {k: round(v, 3) for k, v in self.phase_durations_ms.items()},
        }
