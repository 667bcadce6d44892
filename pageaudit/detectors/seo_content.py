"""
SEO Content Detector for PageAudit
Title, meta description, canonical and link profile of the page content
"""

from typing import Any, Dict
from urllib.parse import urlparse

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "seo_content",
    "name": "SEO Content Detector",
    "family": "content",
    "kind": "detector",
    "description": "Title and meta description quality, canonical, language and link profile",
}

DEFAULT_OPTIONS = {
    "title_range": (30, 60),
    "description_range": (120, 160),
}


def _in_range(length: int, bounds) -> bool:
    low, high = bounds
    return low <= length <= high


def classify_links(document: Document):
    host = urlparse(document.url).hostname or ""
    internal = external = 0
    for link in document.select("a[href]"):
        href = link.attr("href") or ""
        if href.startswith(("#", "mailto:", "tel:", "javascript:")):
            continue
        link_host = urlparse(href).hostname
        if link_host is None or (host and link_host.lower() == host.lower()):
            internal += 1
        else:
            external += 1
    return internal, external


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    """Check on-page SEO signals carried by the content."""
    options = {**DEFAULT_OPTIONS, **(config or {})}
    title = document.title
    description = document.meta("description") or ""
    h1 = document.select_one("h1")
    h1_text = h1.text() if h1 else ""
    html_el = document.select_one("html")
    internal, external = classify_links(document)

    metrics = {
        "title_length": len(title),
        "meta_description_length": len(description),
        "has_canonical": document.select_one('link[rel="canonical"]') is not None,
        "has_lang": bool(html_el and html_el.attr("lang")),
        "h1_matches_title": bool(h1_text and title and h1_text.lower() in title.lower()),
        "internal_links": internal,
        "external_links": external,
        "has_open_graph": document.meta("og:title") is not None,
    }

    findings = []
    score = 100.0
    if not title:
        score -= 30
        findings.append({"type": "missing_title", "severity": "high", "message": "Page has no <title>"})
    elif not _in_range(len(title), options["title_range"]):
        score -= 10
        findings.append({"type": "title_length", "severity": "low",
                         "message": f"Title length {len(title)} outside {options['title_range']}"})

    if not description:
        score -= 20
        findings.append({"type": "missing_description", "severity": "medium",
                         "message": "Page has no meta description"})
    elif not _in_range(len(description), options["description_range"]):
        score -= 8

    if not metrics["has_canonical"]:
        score -= 8
    if not metrics["has_lang"]:
        score -= 7
    if internal == 0:
        score -= 10
        findings.append({"type": "no_internal_links", "severity": "low", "message": "No internal links found"})
    if not metrics["has_open_graph"]:
        score -= 5

    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
