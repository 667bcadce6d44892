"""
Content Strategy Heuristic for PageAudit
Builds on the optimization judgment to choose where strategy effort should go
"""

from typing import Any, Dict, List

from pageaudit.core.model import DetectionBundle, HeuristicResult
from pageaudit.core.scoring import clamp_score

from ._support import detector_score, mean_of, prior_judgment

METADATA = {
    "id": "content_strategy",
    "name": "Content Strategy Analyzer",
    "family": "content",
    "kind": "heuristic",
    "order": 30,
    "description": "Readability and engagement strategy informed by optimization priorities",
}


async def analyze(detection: DetectionBundle, context: Any, config: Dict[str, Any]) -> HeuristicResult:
    """Rank strategy focus areas.

    Runs after content_optimization; when that judgment is missing the
    strategy is built from detector scores alone and says so.
    """
    readability = detector_score(detection, "readability")
    engagement = detector_score(detection, "engagement")
    optimization = prior_judgment(context.heuristics, "content_optimization")

    focus: List[str] = []
    candidates = {"readability": readability, "engagement": engagement}
    for area, score in sorted(candidates.items(), key=lambda item: (item[1] is None, item[1] or 0)):
        if score is not None and score < 70:
            focus.append(area)
    if optimization is not None:
        focus.extend(area for area in optimization.get("priority_areas", []) if area not in focus)

    score = mean_of([readability, engagement])
    if score is None:
        raise ValueError("readability and engagement results are unavailable")
    score -= min(15, 5 * len(focus))

    judgment = {
        "readability_strategy": readability,
        "engagement_strategy": engagement,
        "strategy_focus": focus,
        "optimization_context": optimization is not None,
    }
    return HeuristicResult(score=round(clamp_score(score), 1), judgment=judgment)
