"""
Tests for the analysis engine
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import make_detector, make_heuristic
from pageaudit.core.cache import ResultCache
from pageaudit.core.config import AnalyzerConfig, GradeBands
from pageaudit.core.engine import (
    AnalysisEngine,
    build_metrics_snapshot,
    coerce_detector_result,
    coerce_enhancement_result,
    coerce_heuristic_result,
)
from pageaudit.core.model import DetectorResult, EnhancementResult, HeuristicResult
from pageaudit.utils.logger import PipelineEventLogger

TARGET = "https://example.com/page"


@pytest.fixture
def engine(loader, test_profile, events):
    return AnalysisEngine(profile=test_profile, plugin_loader=loader, events=events)


class TestDetectPhase:
    """Test concurrent detector execution and fault isolation"""

    @pytest.mark.asyncio
    async def test_failing_detector_is_isolated(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        loader.register("detector", make_detector("det_b", error=RuntimeError("boom")))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert report.detection["det_a"].succeeded
        assert report.detection["det_a"].metrics["words"] == 250
        assert not report.detection["det_b"].succeeded
        assert report.detection["det_b"].error == "boom"
        assert report.detection.summary()["failed_detectors"] == 1
        assert {"type": "unit_failure", "severity": "medium", "phase": "detect",
                "unit": "det_b", "message": "boom"} in report.issues

    @pytest.mark.asyncio
    async def test_detector_error_text_is_kept(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        loader.register("detector", make_detector("det_b", error=Exception("timeout")))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert report.detection["det_b"].to_dict()["success"] is False
        assert report.detection["det_b"].error == "timeout"

    @pytest.mark.asyncio
    async def test_slow_detector_times_out(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        loader.register("detector", make_detector("det_slow", delay=5))

        report = await engine.analyze(TARGET, sample_document,
                                      overrides={"phases": {"detector_timeout": 0.05}})

        assert report.detection["det_a"].succeeded
        assert report.detection["det_slow"].error.startswith("timeout after")

    @pytest.mark.asyncio
    async def test_detectors_run_concurrently(self, engine, loader, sample_document):
        ready = asyncio.Event()

        async def waits(document, config):
            await ready.wait()
            return DetectorResult(score=80)

        async def signals(document, config):
            ready.set()
            return DetectorResult(score=60)

        waiting = make_detector("det_wait")
        waiting.detect = waits
        signalling = make_detector("det_signal")
        signalling.detect = signals
        loader.register("detector", waiting)
        loader.register("detector", signalling)

        report = await engine.analyze(TARGET, sample_document,
                                      overrides={"phases": {"detector_timeout": 2}})

        assert report.detection["det_wait"].succeeded
        assert report.detection["det_signal"].succeeded

    @pytest.mark.asyncio
    async def test_invalid_result_is_a_unit_failure(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", result={"metrics": {"words": 3}}))

        report = await engine.analyze(TARGET, sample_document)

        assert not report.detection["det_a"].succeeded
        assert "no numeric score" in report.detection["det_a"].error

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [
        DetectorResult(score=50, metrics=None),
        DetectorResult(score=50, findings=None),
    ])
    async def test_malformed_typed_result_is_a_unit_failure(self, engine, loader, sample_document, result):
        loader.register("detector", make_detector("det_a", result=result))
        loader.register("detector", make_detector("det_b", score=70))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert not report.detection["det_a"].succeeded
        assert "must be" in report.detection["det_a"].error
        assert report.detection["det_b"].succeeded

    @pytest.mark.asyncio
    async def test_missing_document_fails_every_detector(self, engine, loader):
        loader.register("detector", make_detector("det_a"))

        report = await engine.analyze(TARGET, None)

        assert report.success
        assert report.detection["det_a"].error == "no document to analyze"
        assert report.rules.overall_score == 0

    @pytest.mark.asyncio
    async def test_detector_options_are_passed(self, engine, loader, sample_document):
        seen = {}

        async def detect(document, config):
            seen.update(config)
            return DetectorResult(score=50)

        plugin = make_detector("det_a")
        plugin.detect = detect
        loader.register("detector", plugin)

        await engine.analyze(TARGET, sample_document,
                             overrides={"phases": {"detector_options": {"det_a": {"limit": 3}}}})

        assert seen == {"limit": 3}


class TestHeuristicPhase:
    """Test sequential heuristic execution"""

    @pytest.mark.asyncio
    async def test_heuristics_see_only_earlier_entries(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a"))
        loader.register("heuristic", make_heuristic("h_second", order=20))
        loader.register("heuristic", make_heuristic("h_first", order=10))

        report = await engine.analyze(TARGET, sample_document)

        assert list(report.heuristics) == ["h_first", "h_second"]
        assert report.heuristics["h_first"].judgment["seen"] == []
        assert report.heuristics["h_second"].judgment["seen"] == ["h_first"]

    @pytest.mark.asyncio
    async def test_explicit_order_is_respected(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a"))
        loader.register("heuristic", make_heuristic("h_first", order=10))
        loader.register("heuristic", make_heuristic("h_second", order=20))

        report = await engine.analyze(
            TARGET, sample_document,
            overrides={"phases": {"enabled_heuristics": ["h_second", "h_first"]}},
        )

        assert report.heuristics["h_second"].judgment["seen"] == []
        assert report.heuristics["h_first"].judgment["seen"] == ["h_second"]

    @pytest.mark.asyncio
    async def test_failed_heuristic_does_not_stop_later_ones(self, engine, loader, sample_document):
        async def broken(detection, context, config):
            raise KeyError("missing input")

        loader.register("detector", make_detector("det_a"))
        loader.register("heuristic", make_heuristic("h_first", order=10, analyze=broken))
        loader.register("heuristic", make_heuristic("h_second", order=20))

        report = await engine.analyze(TARGET, sample_document)

        assert not report.heuristics["h_first"].succeeded
        assert report.heuristics["h_second"].succeeded
        assert report.heuristics["h_second"].judgment["seen"] == ["h_first"]

    @pytest.mark.asyncio
    async def test_malformed_judgment_is_a_unit_failure(self, engine, loader, sample_document):
        async def malformed(detection, context, config):
            return HeuristicResult(score=50, judgment=["x"])

        loader.register("detector", make_detector("det_a"))
        loader.register("heuristic", make_heuristic("h_first", order=10, analyze=malformed))
        loader.register("heuristic", make_heuristic("h_second", order=20))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert not report.heuristics["h_first"].succeeded
        assert "judgment must be a mapping" in report.heuristics["h_first"].error
        assert report.heuristics["h_second"].succeeded

    @pytest.mark.asyncio
    async def test_heuristic_reads_detection(self, engine, loader, sample_document):
        async def reads(detection, context, config):
            return HeuristicResult(score=detection["det_a"].sub_score / 2)

        loader.register("detector", make_detector("det_a", score=80))
        loader.register("heuristic", make_heuristic("h_half", order=10, analyze=reads))

        report = await engine.analyze(TARGET, sample_document)

        assert report.heuristics["h_half"].sub_score == 40


class TestRulesAndCombine:
    """Test the rules phase and the combined view"""

    @pytest.mark.asyncio
    async def test_metrics_snapshot_names(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        loader.register("detector", make_detector("det_b", error=RuntimeError("boom")))
        loader.register("heuristic", make_heuristic("h_first", order=10))

        report = await engine.analyze(TARGET, sample_document)
        snapshot = build_metrics_snapshot(report.detection, report.heuristics)

        assert snapshot["det_a.words"] == 250
        assert snapshot["det_a.score"] == 90
        assert snapshot["h_first.score"] == 70
        assert not any(name.startswith("det_b.") for name in snapshot)

    @pytest.mark.asyncio
    async def test_rules_use_detector_metrics(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 50}))

        report = await engine.analyze(TARGET, sample_document)

        assert report.rules.categories["alpha"].category_score == 50
        assert [o.rule for o in report.rules.opportunities] == ["alpha_words"]

    @pytest.mark.asyncio
    async def test_custom_rules_from_configuration(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        custom = [{"name": "enough_words", "metric": "det_a.words", "op": ">=", "threshold": 500}]

        report = await engine.analyze(TARGET, sample_document, overrides={"rules": {"custom_rules": custom}})

        assert report.rules.categories["custom_rules"].failed_count == 1
        assert report.rules.overall_score < 100

    @pytest.mark.asyncio
    async def test_enabled_categories_limit_rules(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        custom = [{"name": "enough_words", "metric": "det_a.words", "op": ">=", "threshold": 500}]

        report = await engine.analyze(TARGET, sample_document, overrides={
            "rules": {"custom_rules": custom},
            "phases": {"enabled_categories": ["alpha"]},
        })

        assert list(report.rules.categories) == ["alpha"]
        assert report.configuration["rule_categories"] == ["alpha"]

    @pytest.mark.asyncio
    async def test_combined_dimension_score(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))

        report = await engine.analyze(TARGET, sample_document)
        alpha = report.combined["per_category"]["alpha"]

        # 0.4 * 90 + 0.3 * 100 over a total weight of 0.7
        assert alpha["score"] == 94
        assert alpha["contributions"] == {"detector": 90, "rules": 100}
        assert report.overall_score == 94
        assert report.grade == "A"
        assert report.combined["overall"]["source"] == "dimensions"
        assert report.insights[0]["type"] == "positive"

    @pytest.mark.asyncio
    async def test_combined_falls_back_to_rules(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", error=RuntimeError("boom")))

        report = await engine.analyze(TARGET, sample_document)

        assert report.combined["per_category"]["alpha"]["score"] is None
        assert report.overall_score == 0
        assert report.combined["overall"]["source"] == "rules"
        assert report.performance["detector_coverage"] == 0.0

    @pytest.mark.asyncio
    async def test_low_dimension_yields_recommendation(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=20, metrics={"words": 10}))

        report = await engine.analyze(TARGET, sample_document)

        category_recs = [r for r in report.recommendations if r["type"] == "category"]
        assert category_recs[0]["category"] == "alpha"
        assert category_recs[0]["priority"] == "high"
        assert any(i["type"] == "improvement" for i in report.insights)

    @pytest.mark.asyncio
    async def test_phase_durations_recorded(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a"))

        report = await engine.analyze(TARGET, sample_document)

        assert set(report.phase_durations_ms) == {"configure", "detect", "heuristic", "rules", "combine"}
        assert report.execution_time_ms > 0


class TestEnhancement:
    """Test the optional enhancement phase"""

    @pytest.mark.asyncio
    async def test_override_is_audited(self, loader, test_profile, events, sample_document):
        enhancer = MagicMock()
        enhancer.enhance = AsyncMock(return_value=EnhancementResult(
            score=42, confidence=0.9, insights=[{"type": "calibration", "message": "adjusted"}]))
        engine = AnalysisEngine(profile=test_profile, plugin_loader=loader, events=events, enhancer=enhancer)
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))

        report = await engine.analyze(TARGET, sample_document)

        overall = report.combined["overall"]
        assert overall["score"] == 42
        assert overall["grade"] == "F"
        assert overall["source"] == "enhancement"
        assert overall["rules_score"] == 100
        events.score_override.assert_called_once()
        assert {"type": "calibration", "message": "adjusted", "source": "enhancement"} in report.insights

    @pytest.mark.asyncio
    async def test_enhancer_failure_is_contained(self, loader, test_profile, events, sample_document):
        enhancer = MagicMock()
        enhancer.enhance = AsyncMock(side_effect=RuntimeError("model unavailable"))
        engine = AnalysisEngine(profile=test_profile, plugin_loader=loader, events=events, enhancer=enhancer)
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert not report.enhancement.success
        assert report.enhancement.error == "model unavailable"
        assert report.combined["overall"]["source"] == "dimensions"
        assert any(i["type"] == "enhancement_failure" for i in report.issues)
        events.score_override.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [
        EnhancementResult(score=float("nan"), confidence=0.9),
        EnhancementResult(score="high", confidence=0.9),
        EnhancementResult(score=80, grade="Z", confidence=0.9),
        EnhancementResult(insights=["plain text"]),
    ])
    async def test_malformed_enhancement_leaves_score_untouched(self, loader, test_profile, events,
                                                               sample_document, result):
        enhancer = MagicMock()
        enhancer.enhance = AsyncMock(return_value=result)
        engine = AnalysisEngine(profile=test_profile, plugin_loader=loader, events=events, enhancer=enhancer)
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert not report.enhancement.success
        assert report.combined["overall"]["score"] == 94
        assert report.combined["overall"]["source"] == "dimensions"
        assert all(i.get("source") != "enhancement" for i in report.insights)
        assert events.unit_failure.call_args.args[0] == "enhancement"
        events.score_override.assert_not_called()

    @pytest.mark.asyncio
    async def test_enhancement_can_be_disabled(self, loader, test_profile, events, sample_document):
        enhancer = MagicMock()
        enhancer.enhance = AsyncMock(return_value=EnhancementResult(score=10))
        engine = AnalysisEngine(profile=test_profile, plugin_loader=loader, events=events, enhancer=enhancer)
        loader.register("detector", make_detector("det_a"))

        report = await engine.analyze(TARGET, sample_document,
                                      overrides={"phases": {"enable_enhancement": False}})

        assert report.enhancement is None
        enhancer.enhance.assert_not_called()


class TestCaching:
    """Test result caching"""

    @pytest.mark.asyncio
    async def test_second_run_is_served_from_cache(self, engine, loader, sample_document, events):
        calls = []
        loader.register("detector", make_detector("det_a", calls=calls))

        first = await engine.analyze(TARGET, sample_document)
        second = await engine.analyze("https://EXAMPLE.com/page/", sample_document)

        assert second is first
        assert calls == ["det_a"]
        events.cache_hit.assert_called_once_with(TARGET)

    @pytest.mark.asyncio
    async def test_bypass_cache_recomputes(self, engine, loader, sample_document):
        calls = []
        loader.register("detector", make_detector("det_a", calls=calls))

        first = await engine.analyze(TARGET, sample_document)
        second = await engine.analyze(TARGET, sample_document, bypass_cache=True)

        assert second is not first
        assert calls == ["det_a", "det_a"]
        assert engine.cache.get(TARGET) is second

    @pytest.mark.asyncio
    async def test_injected_cache_is_used(self, loader, test_profile, sample_document):
        cache = ResultCache()
        engine = AnalysisEngine(profile=test_profile, plugin_loader=loader, cache=cache)
        loader.register("detector", make_detector("det_a"))

        report = await engine.analyze(TARGET, sample_document)

        assert cache.get(TARGET) is report

    @pytest.mark.asyncio
    async def test_overrides_are_not_part_of_cache_key(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))
        custom = {"rules": {"custom_rules": [
            {"name": "enough_words", "metric": "det_a.words", "op": ">=", "threshold": 500}]}}

        first = await engine.analyze(TARGET, sample_document)
        cached = await engine.analyze(TARGET, sample_document, overrides=custom)
        fresh = await engine.analyze(TARGET, sample_document, overrides=custom, bypass_cache=True)

        assert cached is first
        assert "custom_rules" not in cached.rules.categories
        assert "custom_rules" in fresh.rules.categories


class TestConfigureAbort:
    """Test that configuration failures abort the run"""

    @pytest.mark.asyncio
    async def test_invalid_override_aborts(self, engine, loader, sample_document, events):
        loader.register("detector", make_detector("det_a"))

        report = await engine.analyze(TARGET, sample_document,
                                      overrides={"phases": {"detector_timeout": -1}})

        assert not report.success
        assert "detector_timeout" in report.error
        assert set(report.to_dict()) == {"success", "target", "analyzer", "timestamp", "error", "fallback"}
        assert report.fallback["content_detected"] is True
        assert report.fallback["title"] == "Guide to Growing Tomatoes at Home - Garden Notes"
        assert len(engine.cache) == 0
        events.run_aborted.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_section_aborts(self, engine, sample_document):
        report = await engine.analyze(TARGET, sample_document, overrides={"telemetry": {}})

        assert not report.success
        assert "telemetry" in report.error

    @pytest.mark.asyncio
    async def test_unknown_detector_aborts(self, engine, loader, sample_document):
        loader.register("detector", make_detector("det_a"))

        report = await engine.analyze(TARGET, sample_document,
                                      overrides={"phases": {"enabled_detectors": ["det_missing"]}})

        assert not report.success
        assert "det_missing" in report.error

    @pytest.mark.asyncio
    async def test_name_collision_aborts(self, engine, loader, sample_document):
        loader.register("detector", make_detector("shared"))
        loader.register("heuristic", make_heuristic("shared", order=10))

        report = await engine.analyze(TARGET, sample_document)

        assert not report.success
        assert "collide" in report.error

    @pytest.mark.asyncio
    async def test_unknown_profile_aborts(self, loader, sample_document):
        engine = AnalysisEngine(config=AnalyzerConfig(profile="nonexistent"), plugin_loader=loader)

        report = await engine.analyze(TARGET, sample_document)

        assert not report.success
        assert report.analyzer == "nonexistent"
        assert engine.get_engine_stats()["aborted_runs"] == 1

    @pytest.mark.asyncio
    async def test_fallback_without_document(self, engine):
        report = await engine.analyze(TARGET, None, overrides={"profile": 3, "bogus": 1})

        assert not report.success
        assert report.fallback == {"content_detected": False, "url": TARGET,
                                   "title": "", "document_length": 0}


class TestEventSink:
    """Test that event delivery cannot change a run"""

    @pytest.mark.asyncio
    async def test_raising_event_handler_is_harmless(self, loader, test_profile, sample_document):
        broken_logger = MagicMock()
        broken_logger.log.side_effect = RuntimeError("sink down")
        engine = AnalysisEngine(profile=test_profile, plugin_loader=loader,
                                events=PipelineEventLogger(broken_logger))
        loader.register("detector", make_detector("det_a", score=90, metrics={"words": 250}))

        report = await engine.analyze(TARGET, sample_document)

        assert report.success
        assert report.overall_score == 94

    @pytest.mark.asyncio
    async def test_phase_events_emitted(self, engine, loader, sample_document, events):
        loader.register("detector", make_detector("det_a"))

        await engine.analyze(TARGET, sample_document)

        phases = [c.args[0] for c in events.phase_end.call_args_list]
        assert phases == ["configure", "detect", "heuristic", "rules", "combine"]


class TestResultCoercion:
    """Test validation of unit return values"""

    def test_mapping_is_accepted(self):
        result = coerce_detector_result({"score": 75, "metrics": {"a": 1}})
        assert result.score == 75
        assert result.metrics == {"a": 1}

    def test_typed_result_payloads_are_copied(self):
        metrics = {"a": 1}
        result = coerce_detector_result(DetectorResult(score=60, metrics=metrics, findings=({"x": 1},)))

        assert result.metrics == {"a": 1}
        assert result.metrics is not metrics
        assert result.findings == [{"x": 1}]

    @pytest.mark.parametrize("value", [
        None,
        {"score": "high"},
        {"score": True},
        {"score": float("nan")},
        {"score": 50, "success": False},
        {"score": 50, "metrics": [("a", 1)]},
        DetectorResult(score=50, success=False),
        DetectorResult(score=50, metrics=None),
        DetectorResult(score=50, metrics=["a"]),
        DetectorResult(score=50, findings="broken"),
    ])
    def test_unusable_detector_results_raise(self, value):
        with pytest.raises((TypeError, ValueError, RuntimeError)):
            coerce_detector_result(value)

    @pytest.mark.parametrize("value", [
        {"score": 50, "judgment": ["x"]},
        HeuristicResult(score=50, judgment=["x"]),
        HeuristicResult(score=50, judgment=None),
        HeuristicResult(score=None),
        HeuristicResult(score=50, success=False),
    ])
    def test_unusable_heuristic_results_raise(self, value):
        with pytest.raises((TypeError, ValueError, RuntimeError)):
            coerce_heuristic_result(value)

    @pytest.mark.parametrize("value", [
        None,
        EnhancementResult(score=float("nan")),
        EnhancementResult(score="high"),
        EnhancementResult(score=True),
        EnhancementResult(score=80, grade="Z"),
        EnhancementResult(insights=["plain text"]),
        EnhancementResult(insights={"type": "calibration"}),
        EnhancementResult(details=["x"]),
    ])
    def test_unusable_enhancement_results_raise(self, value):
        with pytest.raises((TypeError, ValueError)):
            coerce_enhancement_result(value, GradeBands())

    def test_valid_enhancement_result_is_accepted(self):
        result = coerce_enhancement_result(
            EnhancementResult(score=88, grade="B+", insights=[{"type": "calibration"}]), GradeBands())

        assert result.score == 88
        assert result.insights == [{"type": "calibration"}]
