"""
Content Performance Heuristic for PageAudit
Judges how well copy and media are likely to perform together
"""

from typing import Any, Dict

from pageaudit.core.model import DetectionBundle, HeuristicResult
from pageaudit.core.scoring import clamp_score

from ._support import detector_metric, detector_score, label_for, mean_of, prior_judgment

METADATA = {
    "id": "content_performance",
    "name": "Content Performance Analyzer",
    "family": "content",
    "kind": "heuristic",
    "order": 20,
    "description": "Quality and multimedia performance, media-to-text balance",
}


async def analyze(detection: DetectionBundle, context: Any, config: Dict[str, Any]) -> HeuristicResult:
    quality = detector_score(detection, "content_quality")
    media = detector_score(detection, "multimedia")
    word_count = detector_metric(detection, "content_quality", "word_count", 0)
    images = detector_metric(detection, "multimedia", "image_count", 0)

    # One visual per ~300 words reads as balanced
    expected_media = max(1, word_count // 300)
    media_balance = round(min(1.0, images / expected_media), 2) if word_count else 0.0

    score = mean_of([quality, media])
    if score is None:
        raise ValueError("neither quality nor multimedia results are available")

    optimization = prior_judgment(context.heuristics, "content_optimization")
    if optimization is not None:
        score -= min(10, 3 * optimization.get("priority_count", 0))

    judgment = {
        "quality_assessment": label_for(quality),
        "quality_performance": quality,
        "multimedia_performance": media,
        "media_balance": media_balance,
        "optimization_considered": optimization is not None,
    }
    return HeuristicResult(score=round(clamp_score(score), 1), judgment=judgment)
