"""
Content Structure Detector for PageAudit
Heading hierarchy, content blocks and semantic landmarks
"""

from typing import Any, Dict, List

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "content_structure",
    "name": "Content Structure Detector",
    "family": "content",
    "kind": "detector",
    "description": "Heading hierarchy, content blocks and semantic HTML structure",
}

SEMANTIC_SELECTOR = "header, main, footer, article, section, aside, nav"
DEFAULT_OPTIONS = {
    "min_content_blocks": 3,
    "max_paragraph_words": 150,
}


def heading_levels(document: Document) -> List[int]:
    return [int(el.name[1]) for el in document.select("h1, h2, h3, h4, h5, h6")]


def count_skipped_levels(levels: List[int]) -> int:
    """Count downward jumps of more than one level (h2 -> h4)."""
    skips = 0
    for previous, current in zip(levels, levels[1:]):
        if current > previous + 1:
            skips += 1
    return skips


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    """Analyze the heading hierarchy and structural landmarks."""
    options = {**DEFAULT_OPTIONS, **(config or {})}
    findings = []

    levels = heading_levels(document)
    h1_count = levels.count(1)
    skipped = count_skipped_levels(levels)
    paragraphs = [p.text() for p in document.select("p")]
    paragraphs = [p for p in paragraphs if p]
    paragraph_words = [len(p.split()) for p in paragraphs]
    long_paragraphs = sum(1 for words in paragraph_words if words > options["max_paragraph_words"])
    content_blocks = document.count("article, section, main")
    semantic_elements = document.count(SEMANTIC_SELECTOR)

    metrics = {
        "heading_count": len(levels),
        "h1_count": h1_count,
        "skipped_heading_levels": skipped,
        "max_heading_depth": max(levels) if levels else 0,
        "paragraph_count": len(paragraphs),
        "long_paragraphs": long_paragraphs,
        "avg_paragraph_words": round(sum(paragraph_words) / len(paragraph_words), 1) if paragraph_words else 0.0,
        "list_count": document.count("ul, ol, dl"),
        "link_count": document.count("a[href]"),
        "content_blocks": content_blocks,
        "semantic_elements": semantic_elements,
        "has_main": document.select_one("main") is not None,
    }

    score = 100.0
    if h1_count == 0:
        score -= 25
        findings.append({"type": "missing_h1", "severity": "high", "message": "Page has no H1 heading"})
    elif h1_count > 1:
        score -= 10
        findings.append({"type": "multiple_h1", "severity": "medium", "message": f"Page has {h1_count} H1 headings"})

    if skipped:
        score -= min(20, skipped * 5)
        findings.append({"type": "skipped_levels", "severity": "medium",
                         "message": f"Heading hierarchy skips levels {skipped} time(s)"})

    if not paragraphs:
        score -= 20
        findings.append({"type": "no_paragraphs", "severity": "medium", "message": "No paragraph content found"})
    elif long_paragraphs:
        score -= min(15, long_paragraphs * 3)

    if semantic_elements == 0:
        score -= 15
        findings.append({"type": "no_semantic_html", "severity": "medium",
                         "message": "No semantic landmarks (main, article, section, nav...)"})
    if content_blocks < options["min_content_blocks"]:
        score -= 5

    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
