"""
Resource Strategy Heuristic for PageAudit
Turns the resource inventory into a loading strategy and action list
"""

from typing import Any, Dict

from pageaudit.core.model import DetectionBundle, HeuristicResult
from pageaudit.core.scoring import clamp_score

from ._support import detector_metric, detector_score

METADATA = {
    "id": "resource_strategy",
    "name": "Resource Strategy Analyzer",
    "family": "resource",
    "kind": "heuristic",
    "order": 10,
    "description": "Critical path length, budget utilization and recommended loading actions",
}

DEFAULT_OPTIONS = {"resource_budget": 50}


async def analyze(detection: DetectionBundle, context: Any, config: Dict[str, Any]) -> HeuristicResult:
    options = {**DEFAULT_OPTIONS, **(config or {})}
    base = detector_score(detection, "resource_loading")
    if base is None:
        raise ValueError("resource_loading results are unavailable")

    def metric(name, default=0):
        return detector_metric(detection, "resource_loading", name, default)

    critical_path = metric("render_blocking_resources")
    utilization = round(metric("total_resource_count") / options["resource_budget"], 2)
    actions = []
    if metric("render_blocking_scripts"):
        actions.append("Add async or defer to render-blocking scripts")
    if metric("render_blocking_styles") and not metric("critical_css_inlined", False):
        actions.append("Inline critical CSS and load the rest asynchronously")
    if metric("lazy_image_ratio", 1.0) < 0.5 and metric("image_count") > 3:
        actions.append("Lazy-load below-the-fold images")
    if metric("third_party_domains") > 3 and not metric("preconnect_hints"):
        actions.append("Preconnect to critical third-party origins")
    if utilization > 1:
        actions.append("Reduce the number of requested resources")

    score = base - 5 * len(actions) + (5 if critical_path == 0 else 0)
    judgment = {
        "loading_strategy": "optimized" if not actions else "needs_work",
        "critical_path_length": critical_path,
        "budget_utilization": utilization,
        "recommended_actions": actions,
    }
    return HeuristicResult(score=round(clamp_score(score), 1), judgment=judgment)
