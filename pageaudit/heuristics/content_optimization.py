"""
Content Optimization Heuristic for PageAudit
Combines structure, SEO and depth signals into prioritized optimization areas
"""

from typing import Any, Dict

from pageaudit.core.model import DetectionBundle, HeuristicResult

from ._support import detector_score, mean_of

METADATA = {
    "id": "content_optimization",
    "name": "Content Optimization Analyzer",
    "family": "content",
    "kind": "heuristic",
    "order": 10,
    "description": "Structure, SEO and depth optimization with priority areas",
}

DEFAULT_OPTIONS = {"priority_below": 70}

AREAS = {
    "structure": "content_structure",
    "seo": "seo_content",
    "depth": "content_quality",
}


async def analyze(detection: DetectionBundle, context: Any, config: Dict[str, Any]) -> HeuristicResult:
    options = {**DEFAULT_OPTIONS, **(config or {})}
    scores = {area: detector_score(detection, detector) for area, detector in AREAS.items()}
    overall = mean_of(scores.values())
    if overall is None:
        raise ValueError("no structure, SEO or quality results to optimize from")

    priority_areas = sorted(
        (area for area, score in scores.items() if score is not None and score < options["priority_below"]),
        key=lambda area: scores[area],
    )

    judgment = {
        "structure_optimization": scores["structure"],
        "seo_optimization": scores["seo"],
        "depth_optimization": scores["depth"],
        "priority_areas": priority_areas,
        "priority_count": len(priority_areas),
        "evaluated_areas": sum(1 for score in scores.values() if score is not None),
    }
    return HeuristicResult(score=overall, judgment=judgment)
