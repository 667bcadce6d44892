"""
Rules Engine for PageAudit
Runs weighted rule categories over a flat metrics snapshot, grades the result,
classifies compliance and ranks failed rules into optimization opportunities
"""

from __future__ import annotations

import logging
import operator
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from .config import ConfigurationError, RulesEngineConfig
from .model import IMPACT_LEVELS, Opportunity, OverallAssessment, RuleCategoryResult, RuleVerdict
from .scoring import (
    calculate_grade,
    calculate_level,
    category_score,
    classify_compliance,
    round_half_up,
    weighted_mean,
)

logger = logging.getLogger(__name__)

_MISSING = object()

COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


class MetricsSnapshot(Mapping):
    """Flat, read-only mapping of dotted metric names to values.

    Names follow `<unit>.<metric>`, e.g. `content_structure.heading_count`.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values = dict(values or {})

    @classmethod
    def flatten(cls, sources: Mapping[str, Mapping[str, Any]]) -> "MetricsSnapshot":
        values: Dict[str, Any] = {}
        for prefix, metrics in sources.items():
            _flatten_into(values, prefix, metrics)
        return cls(values)

    def require(self, name: str) -> Any:
        """Return a metric or raise KeyError; rules use this for mandatory inputs."""
        value = self._values.get(name, _MISSING)
        if value is _MISSING or value is None:
            raise KeyError(f"metric {name} is not available")
        return value

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


def _flatten_into(values: Dict[str, Any], prefix: str, data: Any) -> None:
    if isinstance(data, Mapping):
        for key, value in data.items():
            _flatten_into(values, f"{prefix}.{key}", value)
    else:
        values[prefix] = data


@dataclass(frozen=True)
class Rule:
    """A named, weighted, side-effect-free predicate over a metrics snapshot."""

    name: str
    evaluate: Callable[[MetricsSnapshot], RuleVerdict]
    weight: float = 1.0
    category: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not 0 < self.weight <= 1:
            raise ConfigurationError(f"Rule {self.name} weight must be in (0, 1], got {self.weight}")


@dataclass
class RuleCategory:
    """A named group of rules aggregated into one category score."""

    name: str
    rules: List[Rule] = field(default_factory=list)
    description: str = ""

    def add(self, rule: Rule) -> None:
        self.rules.append(rule)


def threshold_rule(
    name: str,
    metric: str,
    op: str,
    threshold: Any,
    weight: float = 1.0,
    category: str = "",
    description: str = "",
    impact: str = "medium",
    impact_when_passed: str = "low",
    default: Any = _MISSING,
) -> Rule:
    """Build a rule comparing one metric against a threshold.

    When the metric is missing the rule fails (the engine records the error)
    unless `default` is given.
    """
    if op not in COMPARATORS:
        raise ConfigurationError(f"Rule {name}: unknown operator {op!r}")
    if impact not in IMPACT_LEVELS or impact_when_passed not in IMPACT_LEVELS:
        raise ConfigurationError(f"Rule {name}: impact must be one of {IMPACT_LEVELS}")
    compare = COMPARATORS[op]

    def evaluate(metrics: MetricsSnapshot) -> RuleVerdict:
        if default is _MISSING:
            value = metrics.require(metric)
        else:
            value = metrics.get(metric, default)
            if value is None:
                value = default
        passed = bool(compare(value, threshold))
        return RuleVerdict(
            rule=name,
            passed=passed,
            observed_value=value,
            threshold=threshold,
            impact=impact_when_passed if passed else impact,
        )

    return Rule(name=name, evaluate=evaluate, weight=weight, category=category, description=description)


def build_category(name: str, specs: Iterable[Mapping[str, Any]], description: str = "") -> RuleCategory:
    """Compile declarative rule specs into a `RuleCategory`.

    Each spec has `name`, `metric`, `op`, `threshold` and optionally
    `weight`, `description`, `impact`, `impact_when_passed`, `default`.
    """
    category = RuleCategory(name=name, description=description)
    for spec in specs:
        missing = [key for key in ("name", "metric", "op", "threshold") if key not in spec]
        if missing:
            raise ConfigurationError(f"Rule spec in category {name} is missing {missing}")
        extra = {key: spec[key] for key in ("weight", "description", "impact", "impact_when_passed", "default") if key in spec}
        category.add(threshold_rule(
            name=spec["name"],
            metric=spec["metric"],
            op=spec["op"],
            threshold=spec["threshold"],
            category=name,
            **extra,
        ))
    return category


class RulesEngine:
    """Evaluates rule categories against a metrics snapshot.

    The engine is a pure function of its inputs plus its static configuration
    and never raises: a total failure still yields a well-formed, zero-score
    `OverallAssessment`.
    """

    def __init__(self, categories: Iterable[RuleCategory], config: Optional[RulesEngineConfig] = None):
        self.categories: Dict[str, RuleCategory] = {}
        for category in categories:
            self.categories[category.name] = category
        self.config = config or RulesEngineConfig()
        self.logger = logging.getLogger(__name__)

    def evaluate(
        self,
        metrics: Mapping[str, Any],
        enabled_categories: Optional[Iterable[str]] = None,
        weights: Optional[Mapping[str, float]] = None,
    ) -> OverallAssessment:
        """Run every enabled category and produce the overall assessment."""
        start = time.perf_counter()
        try:
            assessment = self._evaluate(metrics, enabled_categories, weights)
        except Exception as e:
            self.logger.error(f"Rules engine failed: {e}")
            assessment = self.failed_assessment(str(e))
        assessment.duration_ms = (time.perf_counter() - start) * 1000.0
        return assessment

    def failed_assessment(self, error: str) -> OverallAssessment:
        bands = self.config.grade_bands
        return OverallAssessment(
            overall_score=0,
            grade=calculate_grade(0, bands),
            compliance_status=classify_compliance(0, self.config.compliance),
            level=calculate_level(0),
            success=False,
            error=error,
            notes=[f"Rules evaluation failed: {error}"],
        )

    def _evaluate(
        self,
        metrics: Mapping[str, Any],
        enabled_categories: Optional[Iterable[str]],
        weights: Optional[Mapping[str, float]],
    ) -> OverallAssessment:
        snapshot = metrics if isinstance(metrics, MetricsSnapshot) else MetricsSnapshot(metrics)
        bands = self.config.grade_bands

        if len(snapshot) == 0:
            verdict = RuleVerdict(
                rule="metrics_available",
                passed=False,
                observed_value=0,
                threshold=1,
                impact="high",
                description="No metrics were available to evaluate",
            )
            return OverallAssessment(
                overall_score=0,
                grade=calculate_grade(0, bands),
                compliance_status=classify_compliance(0, self.config.compliance),
                level=calculate_level(0),
                categories={"metrics": RuleCategoryResult(category="metrics", verdicts=[verdict], failed_count=1)},
                rules_executed=1,
                rules_failed=1,
                notes=["Empty metrics snapshot: nothing to evaluate"],
            )

        selected = self._select_categories(enabled_categories)
        weight_table = dict(self.config.category_weights)
        if weights:
            weight_table.update(weights)

        results: Dict[str, RuleCategoryResult] = {}
        for category in selected:
            weight = float(weight_table.get(category.name, self.config.default_category_weight))
            results[category.name] = self._run_category(category, snapshot, weight)

        # Categories that executed nothing are reported but never averaged in
        scored = [(r.category_score, r.weight) for r in results.values() if r.executed > 0]
        mean = weighted_mean(scored)
        overall = round_half_up(mean) if mean is not None else 0
        notes = []
        if mean is None:
            notes.append("No rule category executed any rules")

        opportunities = self._rank_opportunities(results)
        all_verdicts = [v for r in results.values() for v in r.verdicts]
        passed = sum(1 for v in all_verdicts if v.passed)

        assessment = OverallAssessment(
            overall_score=overall,
            grade=calculate_grade(overall, bands),
            compliance_status=classify_compliance(overall, self.config.compliance),
            level=calculate_level(overall),
            categories=results,
            opportunities=opportunities,
            high_impact=[o for o in opportunities if o.impact == "high"],
            quick_wins=[o for o in opportunities if o.effort == "low"],
            long_term=[o for o in opportunities if o.effort == "high"],
            rules_executed=len(all_verdicts),
            rules_passed=passed,
            rules_failed=len(all_verdicts) - passed,
            notes=notes,
        )
        assessment.recommendations = self._build_recommendations(assessment)
        return assessment

    def _select_categories(self, enabled: Optional[Iterable[str]]) -> List[RuleCategory]:
        if enabled is None:
            return list(self.categories.values())
        names = list(enabled)
        unknown = [name for name in names if name not in self.categories]
        if unknown:
            self.logger.warning(f"Ignoring unknown rule categories: {unknown}")
        return [self.categories[name] for name in names if name in self.categories]

    def _run_category(self, category: RuleCategory, snapshot: MetricsSnapshot, weight: float) -> RuleCategoryResult:
        verdicts = [self._run_rule(rule, category.name, snapshot) for rule in category.rules]
        passed = sum(1 for v in verdicts if v.passed)
        return RuleCategoryResult(
            category=category.name,
            verdicts=verdicts,
            passed_count=passed,
            failed_count=len(verdicts) - passed,
            category_score=category_score((v.weight, v.passed) for v in verdicts),
            weight=weight,
        )

    def _run_rule(self, rule: Rule, category: str, snapshot: MetricsSnapshot) -> RuleVerdict:
        try:
            verdict = rule.evaluate(snapshot)
            if not isinstance(verdict, RuleVerdict):
                raise TypeError(f"rule returned {type(verdict).__name__}, expected RuleVerdict")
        except Exception as e:
            self.logger.debug(f"Rule {rule.name} failed: {e}")
            return RuleVerdict(
                rule=rule.name,
                passed=False,
                impact="high",
                category=category,
                weight=rule.weight,
                description=rule.description,
                error=str(e) or e.__class__.__name__,
            )
        return RuleVerdict(
            rule=rule.name,
            passed=verdict.passed,
            observed_value=verdict.observed_value,
            threshold=verdict.threshold,
            impact=verdict.impact,
            category=category,
            weight=rule.weight,
            description=rule.description or verdict.description,
            error=verdict.error,
        )

    def estimate_score_gain(self, verdict: RuleVerdict, results: Mapping[str, RuleCategoryResult]) -> float:
        """Points the overall score would gain if this rule passed."""
        if verdict.rule in self.config.score_gain_table:
            return float(self.config.score_gain_table[verdict.rule])
        category = results.get(verdict.category)
        if category is None or category.executed == 0:
            return 0.0
        total_category_weight = sum(r.weight for r in results.values() if r.executed > 0)
        total_rule_weight = sum(v.weight for v in category.verdicts)
        if total_category_weight <= 0 or total_rule_weight <= 0:
            return 0.0
        share = (category.weight / total_category_weight) * (verdict.weight / total_rule_weight)
        return round(100.0 * share, 2)

    def _rank_opportunities(self, results: Mapping[str, RuleCategoryResult]) -> List[Opportunity]:
        opportunities = []
        for category in results.values():
            for verdict in category.verdicts:
                if verdict.passed:
                    continue
                opportunities.append(Opportunity(
                    rule=verdict.rule,
                    impact=verdict.impact,
                    effort=self.config.effort_table.get(verdict.rule, "medium"),
                    estimated_score_gain=self.estimate_score_gain(verdict, results),
                    category=verdict.category,
                    description=verdict.description,
                    current_value=verdict.observed_value,
                    target_value=verdict.threshold,
                ))

        impact_weights = self.config.impact_weights
        effort_weights = self.config.effort_weights
        # Impact-to-effort ratio first, then expected gain, then name for determinism
        opportunities.sort(key=lambda o: (
            -(impact_weights[o.impact] / effort_weights[o.effort]),
            -o.estimated_score_gain,
            o.rule,
        ))
        return opportunities

    def _build_recommendations(self, assessment: OverallAssessment) -> List[Dict[str, Any]]:
        recommendations: List[Dict[str, Any]] = []
        seen = set()
        for kind, priority, group in (
            ("optimization", "high", assessment.high_impact),
            ("quick_win", "medium", assessment.quick_wins),
        ):
            for opportunity in group:
                if opportunity.rule in seen:
                    continue
                seen.add(opportunity.rule)
                recommendations.append({
                    "type": kind,
                    "priority": priority,
                    "rule": opportunity.rule,
                    "category": opportunity.category,
                    "description": opportunity.description,
                    "impact": opportunity.impact,
                    "effort": opportunity.effort,
                    "expected_improvement": opportunity.estimated_score_gain,
                })
        return recommendations
