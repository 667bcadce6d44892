"""
PageAudit Analysis Engine
Main orchestrator: configure, detect, heuristics, rules, enhancement, combine
"""

import logging
import math
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import partial
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .cache import ResultCache, make_target, policy_from_config
from .config import AnalyzerConfig, ConfigurationError, GradeBands, RulesEngineConfig
from .document import Document
from .model import (
    AnalysisReport,
    AnalysisTarget,
    DetectionBundle,
    DetectionEntry,
    DetectorResult,
    EnhancementResult,
    HeuristicBundle,
    HeuristicEntry,
    HeuristicResult,
    OverallAssessment,
)
from .plugin_loader import PluginError, PluginLoader
from .profiles import AnalyzerProfile, get_profile
from .rules_engine import MetricsSnapshot, RulesEngine, build_category
from .scoring import calculate_grade, calculate_level, clamp_score, classify_compliance, round_half_up, weighted_mean
from .tasks import Outcome, gather_settled, settle
from ..utils.logger import PipelineEventLogger

ANALYZER_VERSION = "1.0.0"


@dataclass(frozen=True)
class AnalysisContext:
    """Context handed to heuristics and the enhancer.

    `heuristics` is a frozen view of the entries recorded before the unit
    currently running.
    """

    target: AnalysisTarget
    profile: str
    config: AnalyzerConfig
    heuristics: Mapping[str, HeuristicEntry] = field(default_factory=lambda: MappingProxyType({}))


@dataclass
class RunPlan:
    """Resolved configuration of one run, produced by the configure phase."""

    config: AnalyzerConfig
    profile: AnalyzerProfile
    detectors: Dict[str, Any]
    heuristics: Dict[str, Any]
    rules_engine: RulesEngine
    enabled_categories: Optional[List[str]]


def _is_score(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def coerce_detector_result(value: Any) -> DetectorResult:
    """Validate what a detector returned; raise for anything unusable.

    The returned copy owns plain `dict`/`list` payloads, so nothing after this
    call can fail on a malformed result.
    """
    if isinstance(value, Mapping):
        if value.get("success", True) is False:
            raise RuntimeError(value.get("error") or "detector reported failure")
        value = DetectorResult(
            score=value.get("score"),
            metrics=value.get("metrics") or {},
            findings=value.get("findings") or [],
        )
    if not isinstance(value, DetectorResult):
        raise TypeError(f"detector returned {type(value).__name__}, expected DetectorResult")
    if not value.success:
        raise RuntimeError("detector reported failure")
    if not _is_score(value.score):
        raise ValueError(f"detector result has no numeric score: {value.score!r}")
    if not isinstance(value.metrics, Mapping):
        raise TypeError(f"detector metrics must be a mapping, got {type(value.metrics).__name__}")
    if not isinstance(value.findings, (list, tuple)):
        raise TypeError(f"detector findings must be a list, got {type(value.findings).__name__}")
    return replace(value, metrics=dict(value.metrics), findings=list(value.findings))


def coerce_heuristic_result(value: Any) -> HeuristicResult:
    if isinstance(value, Mapping):
        if value.get("success", True) is False:
            raise RuntimeError(value.get("error") or "heuristic reported failure")
        value = HeuristicResult(score=value.get("score"), judgment=value.get("judgment") or {})
    if not isinstance(value, HeuristicResult):
        raise TypeError(f"heuristic returned {type(value).__name__}, expected HeuristicResult")
    if not value.success:
        raise RuntimeError("heuristic reported failure")
    if not _is_score(value.score):
        raise ValueError(f"heuristic result has no numeric score: {value.score!r}")
    if not isinstance(value.judgment, Mapping):
        raise TypeError(f"heuristic judgment must be a mapping, got {type(value.judgment).__name__}")
    return replace(value, judgment=dict(value.judgment))


def coerce_enhancement_result(value: Any, bands: GradeBands) -> EnhancementResult:
    """Validate an enhancer's result before it may override the combined score."""
    if not isinstance(value, EnhancementResult):
        raise TypeError(f"enhancer returned {type(value).__name__}, expected EnhancementResult")
    if value.score is not None and not _is_score(value.score):
        raise ValueError(f"enhancement score is not numeric: {value.score!r}")
    if value.grade is not None and value.grade not in {letter for _, letter in bands.bands}:
        raise ValueError(f"enhancement grade {value.grade!r} is not a known grade")
    if not isinstance(value.insights, (list, tuple)) or not all(isinstance(i, Mapping) for i in value.insights):
        raise TypeError("enhancement insights must be a list of mappings")
    if not isinstance(value.details, Mapping):
        raise TypeError(f"enhancement details must be a mapping, got {type(value.details).__name__}")
    return replace(value, insights=[dict(i) for i in value.insights], details=dict(value.details))


def build_metrics_snapshot(detection: DetectionBundle, heuristics: HeuristicBundle) -> MetricsSnapshot:
    """Flatten successful units into `<unit>.<metric>` names; failed units contribute nothing."""
    sources: Dict[str, Dict[str, Any]] = {}
    for name, entry in detection.items():
        if entry.succeeded:
            sources[name] = {**entry.metrics, "score": entry.sub_score}
    for name, entry in heuristics.items():
        if entry.succeeded:
            sources[name] = {**entry.judgment, "score": entry.sub_score}
    return MetricsSnapshot.flatten(sources)


class AnalysisEngine:
    """Runs one analyzer profile over documents, one report per target."""

    def __init__(self,
                 profile: Union[str, AnalyzerProfile, None] = None,
                 config: Optional[AnalyzerConfig] = None,
                 logger: Optional[logging.Logger] = None,
                 events: Optional[PipelineEventLogger] = None,
                 cache: Optional[ResultCache] = None,
                 enhancer: Any = None,
                 plugin_loader: Optional[PluginLoader] = None):

        self.config = config or AnalyzerConfig()
        self.profile = profile
        self.logger = logger or logging.getLogger(__name__)
        self.events = events or PipelineEventLogger(self.logger)
        self.cache = cache if cache is not None else ResultCache(policy_from_config(self.config.cache))
        self.enhancer = enhancer

        self.plugin_loader = plugin_loader
        self._plugins_loaded = plugin_loader is not None

        # Statistics
        self.total_runs = 0
        self.aborted_runs = 0

    def _ensure_plugins(self) -> PluginLoader:
        if self.plugin_loader is None:
            self.plugin_loader = PluginLoader()
        if not self._plugins_loaded:
            loaded_count = self.plugin_loader.load_all_plugins()
            if loaded_count == 0:
                self.logger.warning("No plugins loaded - analysis will have limited functionality")
            self._plugins_loaded = True
        return self.plugin_loader

    def _resolve_profile(self, config: AnalyzerConfig) -> AnalyzerProfile:
        if isinstance(self.profile, AnalyzerProfile):
            return self.profile
        return get_profile(self.profile or config.profile)

    def _select(self, kind: str, profile: AnalyzerProfile, names: Optional[List[str]]) -> Dict[str, Any]:
        loader = self._ensure_plugins()
        if names is None:
            return loader.filter_plugins(kind, family=profile.family)

        selected = {}
        for name in names:
            plugin = loader.get_plugin(kind, name)
            if plugin is None:
                raise ConfigurationError(f"Unknown {kind} {name!r}")
            if name in selected:
                raise ConfigurationError(f"{kind.capitalize()} {name!r} listed twice")
            selected[name] = plugin
        # Explicit lists keep the caller's order
        return selected

    def configure(self, overrides: Optional[Mapping[str, Any]] = None) -> RunPlan:
        """Resolve configuration, plugins and the rules engine for one run.

        Raises ConfigurationError (or PluginError); this is the only phase
        whose failure aborts a run.
        """
        config = self.config.resolve(overrides)
        profile = self._resolve_profile(config)
        phases = config.phases

        detectors = self._select("detector", profile, phases.enabled_detectors
                                 if phases.enabled_detectors is not None else profile.detectors)
        heuristics = self._select("heuristic", profile, phases.enabled_heuristics
                                  if phases.enabled_heuristics is not None else profile.heuristics)
        clashes = set(detectors) & set(heuristics)
        if clashes:
            raise ConfigurationError(f"Detector and heuristic names collide: {sorted(clashes)}")

        categories = list(profile.rule_categories)
        if config.rules.custom_rules:
            categories.append(build_category("custom_rules", config.rules.custom_rules,
                                             description="Rules supplied through configuration"))

        rules_config: RulesEngineConfig = replace(
            config.rules,
            category_weights={**profile.category_weights, **config.rules.category_weights},
            effort_table={**profile.effort_table, **config.rules.effort_table},
            score_gain_table={**profile.score_gain_table, **config.rules.score_gain_table},
        )

        return RunPlan(
            config=config,
            profile=profile,
            detectors=detectors,
            heuristics=heuristics,
            rules_engine=RulesEngine(categories, rules_config),
            enabled_categories=phases.enabled_categories,
        )

    async def analyze(self,
                      target: Union[str, AnalysisTarget],
                      document: Optional[Document],
                      overrides: Optional[Mapping[str, Any]] = None,
                      bypass_cache: bool = False) -> AnalysisReport:
        """Analyze one document and return its report.

        A cached report for the same target is returned unchanged unless
        `bypass_cache` is set, in which case the run recomputes and refreshes
        the cache entry. The cache key is the normalized target only:
        `overrides` (including a different profile) do not take part in it,
        so pass `bypass_cache=True` when re-analyzing a target with new
        overrides.
        """
        target = make_target(target)
        self.total_runs += 1

        if not bypass_cache:
            cached = self.cache.get(target)
            if cached is not None:
                self.events.cache_hit(target.key)
                return cached

        run_start = time.perf_counter()
        durations: Dict[str, float] = {}

        # Phase 1: configure
        phase_start = self._begin("configure", target)
        try:
            plan = self.configure(overrides)
        except (ConfigurationError, PluginError) as e:
            return self._abort(target, document, e)
        except Exception as e:
            self.logger.exception(f"Unexpected error while configuring analysis of {target}")
            return self._abort(target, document, e)
        durations["configure"] = self._end("configure", target, phase_start,
                                           detectors=len(plan.detectors), heuristics=len(plan.heuristics))

        context = AnalysisContext(target=target, profile=plan.profile.name, config=plan.config)

        # Phase 2: detect (concurrent, all-settle)
        phase_start = self._begin("detect", target)
        detection = await self.run_detectors(plan, document)
        durations["detect"] = self._end("detect", target, phase_start, **detection.summary())

        # Phase 3: heuristics (sequential, declared order)
        phase_start = self._begin("heuristic", target)
        heuristics = await self.run_heuristics(plan, detection, context)
        durations["heuristic"] = self._end("heuristic", target, phase_start, **heuristics.summary())

        # Phase 4: rules
        phase_start = self._begin("rules", target)
        snapshot = build_metrics_snapshot(detection, heuristics)
        rules = plan.rules_engine.evaluate(snapshot, plan.enabled_categories)
        if not rules.success:
            self.events.unit_failure("rules", "rules_engine", rules.error or "unknown error", rules.duration_ms)
        durations["rules"] = self._end("rules", target, phase_start,
                                       score=rules.overall_score, grade=rules.grade)

        # Phase 5: enhancement (optional)
        enhancement = None
        if self.enhancer is not None and plan.config.phases.enable_enhancement:
            phase_start = self._begin("enhancement", target)
            enhancement = await self.run_enhancement(plan, detection, heuristics, rules,
                                                     replace(context, heuristics=heuristics.view()))
            durations["enhancement"] = self._end("enhancement", target, phase_start,
                                                 success=enhancement.success)

        # Phase 6: combine
        phase_start = self._begin("combine", target)
        report = AnalysisReport(
            target=target,
            success=True,
            analyzer=plan.profile.name,
            version=plan.profile.version,
            timestamp=datetime.now().isoformat(),
            configuration=self._describe_plan(plan),
            detection=detection,
            heuristics=heuristics,
            rules=rules,
            enhancement=enhancement,
        )
        self.combine(report, plan, snapshot)
        durations["combine"] = self._end("combine", target, phase_start,
                                         score=report.overall_score, grade=report.grade)

        report.phase_durations_ms = durations
        report.execution_time_ms = (time.perf_counter() - run_start) * 1000.0
        report.performance["analysis_time_ms"] = round(report.execution_time_ms, 3)

        self.cache.put(target, report)
        self.logger.info(f"Analysis of {target} completed: {report.overall_score} ({report.grade})")
        return report

    async def run_detectors(self, plan: RunPlan, document: Optional[Document]) -> DetectionBundle:
        """Run every selected detector concurrently and wait for all to settle."""
        options = plan.config.phases.detector_options
        units = [
            (name, partial(self._invoke_detector, plugin, document, dict(options.get(name, {}))))
            for name, plugin in plan.detectors.items()
        ]
        outcomes = await gather_settled(units, timeout=plan.config.phases.detector_timeout)

        entries = {}
        for outcome in outcomes:
            if outcome.ok:
                result: DetectorResult = outcome.value
                entries[outcome.name] = DetectionEntry(
                    name=outcome.name,
                    succeeded=True,
                    sub_score=round(clamp_score(result.score), 2),
                    metrics=MappingProxyType(dict(result.metrics)),
                    findings=tuple(result.findings),
                    duration_ms=outcome.duration_ms,
                )
            else:
                entries[outcome.name] = self._failed_entry(DetectionEntry, "detect", outcome)
        return DetectionBundle(entries)

    async def _invoke_detector(self, plugin: Any, document: Optional[Document], options: Dict[str, Any]):
        if document is None:
            raise ValueError("no document to analyze")
        return coerce_detector_result(await plugin.detect(document, options))

    async def run_heuristics(self, plan: RunPlan, detection: DetectionBundle,
                             context: AnalysisContext) -> HeuristicBundle:
        """Run heuristics one at a time; each sees only the entries before it."""
        options = plan.config.phases.heuristic_options
        bundle = HeuristicBundle()
        for name, plugin in plan.heuristics.items():
            unit_context = replace(context, heuristics=bundle.view())
            outcome = await settle(
                name,
                partial(self._invoke_heuristic, plugin, detection, unit_context, dict(options.get(name, {}))),
                timeout=plan.config.phases.heuristic_timeout,
            )
            if outcome.ok:
                result: HeuristicResult = outcome.value
                bundle.append(HeuristicEntry(
                    name=name,
                    succeeded=True,
                    sub_score=round(clamp_score(result.score), 2),
                    judgment=MappingProxyType(dict(result.judgment)),
                    duration_ms=outcome.duration_ms,
                ))
            else:
                bundle.append(self._failed_entry(HeuristicEntry, "heuristic", outcome))
        return bundle

    async def _invoke_heuristic(self, plugin: Any, detection: DetectionBundle,
                                context: AnalysisContext, options: Dict[str, Any]):
        return coerce_heuristic_result(await plugin.analyze(detection, context, options))

    async def run_enhancement(self, plan: RunPlan, detection: DetectionBundle, heuristics: HeuristicBundle,
                              rules: OverallAssessment, context: AnalysisContext) -> EnhancementResult:
        """Run the enhancer; a failure is recorded and leaves the rules result untouched."""
        outcome = await settle(
            "enhancement",
            partial(self.enhancer.enhance, detection, heuristics, rules, context),
            timeout=plan.config.phases.enhancement_timeout,
        )
        if outcome.ok:
            try:
                result = coerce_enhancement_result(outcome.value, plan.config.rules.grade_bands)
            except (TypeError, ValueError) as e:
                error = str(e)
            else:
                result.duration_ms = outcome.duration_ms
                return result
        else:
            error = outcome.error_message

        self.events.unit_failure("enhancement", type(self.enhancer).__name__, error, outcome.duration_ms)
        return EnhancementResult(success=False, error=error, duration_ms=outcome.duration_ms)

    def combine(self, report: AnalysisReport, plan: RunPlan, snapshot: MetricsSnapshot) -> None:
        """Fold every phase output into the report's combined view.

        Deterministic given the phase outputs and configuration.
        """
        thresholds = plan.config.combine
        bands = plan.config.rules.grade_bands
        rules = report.rules

        per_category = {}
        weighted_dimensions: List[Tuple[float, float]] = []
        for dimension in plan.profile.dimensions:
            contributions = self._dimension_contributions(dimension, report, snapshot)
            mean = weighted_mean(contributions.values())
            score = round_half_up(clamp_score(mean)) if mean is not None else None
            per_category[dimension.name] = {
                "title": dimension.title,
                "score": score,
                "grade": calculate_grade(score, bands) if score is not None else None,
                "contributions": {source: value for source, (value, _) in contributions.items()},
            }
            if score is not None:
                weighted_dimensions.append((score, dimension.weight))

        mean = weighted_mean(weighted_dimensions)
        if mean is not None:
            overall_score, source = round_half_up(clamp_score(mean)), "dimensions"
        else:
            overall_score, source = rules.overall_score, "rules"
        overall_grade = calculate_grade(overall_score, bands)

        enhancement = report.enhancement
        if enhancement is not None and enhancement.success and enhancement.score is not None:
            new_score = round_half_up(clamp_score(enhancement.score))
            new_grade = enhancement.grade or calculate_grade(new_score, bands)
            self.events.score_override(report.target.key, f"{overall_score} ({overall_grade})",
                                       f"{new_score} ({new_grade})", "enhancement")
            overall_score, overall_grade, source = new_score, new_grade, "enhancement"

        report.combined = {
            "per_category": per_category,
            "overall": {
                "score": overall_score,
                "grade": overall_grade,
                "compliance_status": classify_compliance(overall_score, plan.config.rules.compliance),
                "level": calculate_level(overall_score),
                "source": source,
                "rules_score": rules.overall_score,
                "rules_grade": rules.grade,
            },
        }
        report.insights = self._insights(plan, per_category, enhancement, thresholds)
        report.recommendations = self._recommendations(plan, per_category, rules, thresholds)
        report.issues = self._issues(plan, report, snapshot)
        report.inventory = {name: snapshot.get(metric) for name, metric in plan.profile.inventory.items()}
        report.performance = self._coverage(report)

    def _dimension_contributions(self, dimension, report: AnalysisReport,
                                 snapshot: MetricsSnapshot) -> Dict[str, Tuple[float, float]]:
        contributions: Dict[str, Tuple[float, float]] = {}
        if dimension.detector:
            entry = report.detection.get(dimension.detector)
            if entry is not None and entry.succeeded:
                contributions["detector"] = (entry.sub_score, dimension.detector_weight)
        if dimension.heuristic_metric:
            value = snapshot.get(dimension.heuristic_metric)
            if _is_score(value):
                contributions["heuristic"] = (clamp_score(value), dimension.heuristic_weight)
        if dimension.rule_category:
            category = report.rules.categories.get(dimension.rule_category)
            if category is not None and category.executed > 0:
                contributions["rules"] = (category.category_score, dimension.rules_weight)
        return contributions

    def _insights(self, plan: RunPlan, per_category: Dict[str, Dict],
                  enhancement: Optional[EnhancementResult], thresholds) -> List[Dict[str, Any]]:
        insights = []
        for dimension in plan.profile.dimensions:
            score = per_category[dimension.name]["score"]
            if score is None:
                continue
            if score >= thresholds.insight_positive_min:
                insights.append({"type": "positive", "category": dimension.name,
                                 "message": dimension.positive_message or f"{dimension.title} is strong",
                                 "score": score})
            elif score < thresholds.insight_improvement_below:
                insights.append({"type": "improvement", "category": dimension.name,
                                 "message": dimension.improvement_message or f"{dimension.title} needs work",
                                 "score": score})
        if enhancement is not None and enhancement.success:
            for insight in enhancement.insights:
                insights.append({**insight, "source": "enhancement"})
        return insights

    def _recommendations(self, plan: RunPlan, per_category: Dict[str, Dict],
                         rules: OverallAssessment, thresholds) -> List[Dict[str, Any]]:
        recommendations = []
        for dimension in plan.profile.dimensions:
            score = per_category[dimension.name]["score"]
            if score is None or score >= thresholds.recommendation_below:
                continue
            recommendations.append({
                "type": "category",
                "category": dimension.name,
                "priority": "high" if score < thresholds.insight_improvement_below else "medium",
                "title": f"Improve {dimension.title}",
                "description": dimension.improvement_message,
                "actions": list(dimension.actions),
                "score": score,
            })
        recommendations.extend(rules.recommendations)
        return recommendations

    def _issues(self, plan: RunPlan, report: AnalysisReport, snapshot: MetricsSnapshot) -> List[Dict[str, Any]]:
        issues = []
        for check in plan.profile.issue_checks:
            value = snapshot.get(check.metric)
            if value is None:
                continue
            try:
                triggered = check.triggered(value)
            except TypeError:
                self.logger.debug(f"Issue check {check.issue_type} cannot compare {value!r}")
                continue
            if triggered:
                issues.append({"type": check.issue_type, "severity": check.severity,
                               "message": check.message, "value": value})

        for phase, bundle in (("detect", report.detection), ("heuristic", report.heuristics)):
            for name, entry in bundle.items():
                if not entry.succeeded:
                    issues.append({"type": "unit_failure", "severity": "medium", "phase": phase,
                                   "unit": name, "message": entry.error})
        if not report.rules.success:
            issues.append({"type": "rules_failure", "severity": "high", "phase": "rules",
                           "message": report.rules.error})
        if report.enhancement is not None and not report.enhancement.success:
            issues.append({"type": "enhancement_failure", "severity": "low", "phase": "enhancement",
                           "message": report.enhancement.error})
        return issues

    def _coverage(self, report: AnalysisReport) -> Dict[str, Any]:
        detection = report.detection.summary()
        heuristics = report.heuristics.summary()
        rules = report.rules

        def ratio(part, whole):
            return round(part / whole, 3) if whole else 0.0

        return {
            "detector_coverage": ratio(detection["successful_detectors"], detection["total_detectors"]),
            "heuristic_coverage": ratio(heuristics["successful_heuristics"], heuristics["total_heuristics"]),
            "rule_pass_rate": ratio(rules.rules_passed, rules.rules_executed),
            "detection_time_ms": detection["total_execution_ms"],
            "heuristic_time_ms": heuristics["total_execution_ms"],
            "rules_time_ms": round(rules.duration_ms, 3),
        }

    def _failed_entry(self, entry_type, phase: str, outcome: Outcome):
        error = outcome.error_message or "unknown error"
        self.events.unit_failure(phase, outcome.name, error, outcome.duration_ms)
        return entry_type(name=outcome.name, succeeded=False, error=error, duration_ms=outcome.duration_ms)

    def _describe_plan(self, plan: RunPlan) -> Dict[str, Any]:
        phases = plan.config.phases
        return {
            "profile": plan.profile.name,
            "detectors": list(plan.detectors),
            "heuristics": list(plan.heuristics),
            "rule_categories": list(plan.enabled_categories
                                    if plan.enabled_categories is not None
                                    else plan.rules_engine.categories),
            "enhancement": self.enhancer is not None and phases.enable_enhancement,
            "timeouts": {
                "detector": phases.detector_timeout,
                "heuristic": phases.heuristic_timeout,
                "enhancement": phases.enhancement_timeout,
            },
        }

    def _abort(self, target: AnalysisTarget, document: Optional[Document], error: Exception) -> AnalysisReport:
        """Reduced report for a run whose configuration could not be resolved. Never cached."""
        self.aborted_runs += 1
        message = str(error) or error.__class__.__name__
        self.events.run_aborted(target.key, message)
        if isinstance(self.profile, AnalyzerProfile):
            analyzer = self.profile.name
        else:
            analyzer = str(self.profile or self.config.profile)
        return AnalysisReport(
            target=target,
            success=False,
            analyzer=analyzer,
            timestamp=datetime.now().isoformat(),
            error=message,
            fallback=self.fallback_payload(target, document),
        )

    @staticmethod
    def fallback_payload(target: AnalysisTarget, document: Optional[Document]) -> Dict[str, Any]:
        present = document is not None and not document.is_empty
        return {
            "content_detected": present,
            "url": (document.url if document is not None and document.url else target.raw or target.key),
            "title": document.title if present else "",
            "document_length": len(document.html) if document is not None else 0,
        }

    def _begin(self, phase: str, target: AnalysisTarget) -> float:
        self.events.phase_start(phase, target.key)
        return time.perf_counter()

    def _end(self, phase: str, target: AnalysisTarget, started: float, **fields: Any) -> float:
        duration_ms = (time.perf_counter() - started) * 1000.0
        self.events.phase_end(phase, target.key, duration_ms, **fields)
        return duration_ms

    def get_engine_stats(self) -> Dict[str, Any]:
        return {
            "total_runs": self.total_runs,
            "aborted_runs": self.aborted_runs,
            "cache": self.cache.stats(),
        }
