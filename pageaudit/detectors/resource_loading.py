"""
Resource Loading Detector for PageAudit
Scripts, stylesheets, images and resource hints as declared in the markup
"""

from typing import Any, Dict, Set
from urllib.parse import urlparse

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "resource_loading",
    "name": "Resource Loading Detector",
    "family": "resource",
    "kind": "detector",
    "description": "Render-blocking resources, third-party origins, lazy loading and resource hints",
}


def _origin(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    """Inventory declared resources and how they are loaded."""
    page_host = _origin(document.url)
    scripts = document.select("script")
    external_scripts = [s for s in scripts if s.has_attr("src")]
    inline_scripts = [s for s in scripts if not s.has_attr("src")]
    stylesheets = document.select('link[rel="stylesheet"]')
    images = document.select("img")

    blocking_scripts = sum(
        1 for s in document.select("head script[src]")
        if not (s.has_attr("async") or s.has_attr("defer") or (s.attr("type") or "") == "module")
    )
    blocking_styles = sum(
        1 for link in document.select('head link[rel="stylesheet"]')
        if (link.attr("media") or "all").lower() in ("all", "screen")
    )

    third_party: Set[str] = set()
    for el in external_scripts:
        host = _origin(el.attr("src") or "")
        if host and host != page_host:
            third_party.add(host)
    for el in stylesheets:
        host = _origin(el.attr("href") or "")
        if host and host != page_host:
            third_party.add(host)

    lazy_images = sum(1 for img in images if (img.attr("loading") or "").lower() == "lazy")

    metrics = {
        "script_count": len(external_scripts),
        "inline_script_count": len(inline_scripts),
        "inline_script_bytes": sum(len(s.text()) for s in inline_scripts),
        "stylesheet_count": len(stylesheets),
        "image_count": len(images),
        "lazy_image_ratio": round(lazy_images / len(images), 3) if images else 1.0,
        "render_blocking_scripts": blocking_scripts,
        "render_blocking_styles": blocking_styles,
        "render_blocking_resources": blocking_scripts + blocking_styles,
        "third_party_domains": len(third_party),
        "preload_hints": document.count('link[rel="preload"]'),
        "preconnect_hints": document.count('link[rel="preconnect"], link[rel="dns-prefetch"]'),
        "critical_css_inlined": document.select_one("head style") is not None,
        "total_resource_count": len(external_scripts) + len(stylesheets) + len(images),
    }

    findings = []
    if metrics["render_blocking_resources"]:
        findings.append({"type": "render_blocking", "severity": "high",
                         "message": f"{metrics['render_blocking_resources']} render-blocking resource(s) in <head>"})
    if len(third_party) > 5:
        findings.append({"type": "third_party", "severity": "medium",
                         "message": f"Resources loaded from {len(third_party)} third-party origins"})

    score = 100.0
    score -= min(30, metrics["render_blocking_resources"] * 6)
    score -= min(20, max(0, metrics["total_resource_count"] - 50) * 0.5)
    score -= min(15, max(0, len(third_party) - 3) * 3)
    score -= (1 - metrics["lazy_image_ratio"]) * 15 if len(images) > 3 else 0
    score += 5 if metrics["preconnect_hints"] else 0

    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
