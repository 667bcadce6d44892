"""
Score calibration for PageAudit
Optional enhancement step that reconciles unit sub-scores with the rules
result and proposes an override when it is confident enough
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from pageaudit.core.config import EnhancementConfig
from pageaudit.core.model import DetectionBundle, EnhancementResult, HeuristicBundle, OverallAssessment


class ScoreCalibrator:
    """Confidence-weighted calibration of the final score.

    Confidence is the share of detectors that succeeded, reduced by how much
    the successful sub-scores disagree with each other. Below
    `confidence_threshold` no override is proposed.
    """

    def __init__(self, config: Optional[EnhancementConfig] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _settings(self, context: Any) -> EnhancementConfig:
        if self.config is not None:
            return self.config
        run_config = getattr(context, "config", None)
        return getattr(run_config, "enhancement", None) or EnhancementConfig()

    def extract_features(self, detection: DetectionBundle, heuristics: HeuristicBundle) -> np.ndarray:
        """Sub-scores of every successful detector and heuristic."""
        scores = [entry.sub_score for entry in detection.values() if entry.succeeded]
        scores.extend(entry.sub_score for entry in heuristics.values() if entry.succeeded)
        return np.array(scores, dtype=float)

    def confidence(self, detection: DetectionBundle, scores: np.ndarray) -> float:
        if scores.size == 0 or len(detection) == 0:
            return 0.0
        coverage = len(detection.succeeded) / len(detection)
        dispersion = min(1.0, float(np.std(scores)) / 50.0)
        return round(coverage * (1.0 - 0.5 * dispersion), 3)

    async def enhance(self,
                      detection: DetectionBundle,
                      heuristics: HeuristicBundle,
                      rules: OverallAssessment,
                      context: Any) -> EnhancementResult:
        settings = self._settings(context)
        scores = self.extract_features(detection, heuristics)
        confidence = self.confidence(detection, scores)

        if scores.size == 0:
            return EnhancementResult(confidence=0.0, details={"reason": "no successful units to calibrate from"})

        unit_mean = float(np.mean(scores))
        if rules.success and rules.rules_executed:
            calibrated = settings.rules_weight * rules.overall_score + (1 - settings.rules_weight) * unit_mean
        else:
            calibrated = unit_mean
        calibrated = float(np.clip(calibrated, 0, 100))

        insights = self._insights(detection, unit_mean, rules)
        details: Dict[str, Any] = {
            "unit_mean": round(unit_mean, 2),
            "unit_spread": round(float(np.std(scores)), 2),
            "units_considered": int(scores.size),
            "calibrated_score": round(calibrated, 2),
            "threshold": settings.confidence_threshold,
        }

        if confidence < settings.confidence_threshold:
            self.logger.debug(f"Calibration confidence {confidence} below {settings.confidence_threshold}")
            details["reason"] = "confidence below threshold"
            return EnhancementResult(confidence=confidence, insights=insights, details=details)

        return EnhancementResult(
            score=round(calibrated, 1),
            confidence=confidence,
            insights=insights,
            details=details,
        )

    def _insights(self, detection: DetectionBundle, unit_mean: float,
                  rules: OverallAssessment) -> List[Dict[str, Any]]:
        insights = []
        if rules.success and abs(unit_mean - rules.overall_score) >= 15:
            insights.append({
                "type": "calibration",
                "message": f"Detector scores ({unit_mean:.0f}) and rule compliance "
                           f"({rules.overall_score}) disagree",
            })

        successful = [(entry.sub_score, name) for name, entry in detection.items() if entry.succeeded]
        if len(successful) > 1:
            weakest_score, weakest = min(successful)
            if weakest_score < 60:
                insights.append({
                    "type": "focus",
                    "message": f"{weakest} is the weakest area ({weakest_score:.0f})",
                    "category": weakest,
                })
        return insights
