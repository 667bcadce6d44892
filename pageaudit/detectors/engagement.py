"""
Engagement Detector for PageAudit
Calls to action, forms, social links and interactive elements
"""

import re
from typing import Any, Dict

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "engagement",
    "name": "Engagement Detector",
    "family": "content",
    "kind": "detector",
    "description": "Calls to action, forms, social links and interactivity",
}

CTA_RE = re.compile(
    r"\b(sign up|subscribe|get started|buy|download|contact|learn more|try|register|join|book)\b",
    re.IGNORECASE,
)
SOCIAL_HOSTS = ("facebook.com", "twitter.com", "x.com", "linkedin.com", "instagram.com", "youtube.com")


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    candidates = document.select("a, button, input[type=submit]")
    cta_count = sum(
        1 for el in candidates
        if CTA_RE.search(el.text() or el.attr("value") or "")
    )
    social_links = sum(
        1 for link in document.select("a[href]")
        if any(host in (link.attr("href") or "") for host in SOCIAL_HOSTS)
    )
    text = document.text()

    metrics = {
        "cta_count": cta_count,
        "form_count": document.count("form"),
        "social_links": social_links,
        "interactive_elements": document.count("button, input, select, textarea, details"),
        "question_count": text.count("?"),
        "has_comments": document.select_one('[id*="comment"], [class*="comment"]') is not None,
    }

    findings = []
    score = 40.0
    score += min(25, cta_count * 8)
    score += 10 if metrics["form_count"] else 0
    score += min(10, social_links * 3)
    score += min(10, metrics["interactive_elements"] * 2)
    score += 5 if metrics["has_comments"] else 0

    if cta_count == 0:
        findings.append({"type": "no_cta", "severity": "medium", "message": "No call to action found"})

    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
