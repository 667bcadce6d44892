"""
Content Quality Detector for PageAudit
Content depth, lexical variety and text-to-markup balance
"""

import re
from collections import Counter
from typing import Any, Dict

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "content_quality",
    "name": "Content Quality Detector",
    "family": "content",
    "kind": "detector",
    "description": "Word count, lexical diversity, duplication and text ratio",
}

WORD_RE = re.compile(r"[A-Za-zÀ-ɏ']+")
SENTENCE_RE = re.compile(r"[.!?]+(?:\s|$)")

DEFAULT_OPTIONS = {
    "min_word_count": 300,
    "ideal_word_count": 1000,
}


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    """Measure how substantial and varied the page copy is."""
    options = {**DEFAULT_OPTIONS, **(config or {})}
    text = document.text()
    words = WORD_RE.findall(text)
    word_count = len(words)
    sentence_count = max(1, len(SENTENCE_RE.findall(text))) if words else 0
    unique_ratio = len({w.lower() for w in words}) / word_count if word_count else 0.0

    paragraphs = [p.text() for p in document.select("p") if p.text()]
    duplicates = sum(count - 1 for count in Counter(paragraphs).values() if count > 1)
    html_length = len(document.html) or 1

    metrics = {
        "word_count": word_count,
        "sentence_count": sentence_count,
        "avg_sentence_length": round(word_count / sentence_count, 1) if sentence_count else 0.0,
        "unique_word_ratio": round(unique_ratio, 3),
        "duplicate_paragraphs": duplicates,
        "text_to_html_ratio": round(len(text) / html_length, 3),
    }
    findings = []

    # Depth contributes up to 60 points, variety and ratio the rest
    depth = min(1.0, word_count / options["ideal_word_count"]) * 60
    variety = min(1.0, unique_ratio / 0.5) * 25 if word_count else 0
    ratio = min(1.0, metrics["text_to_html_ratio"] / 0.25) * 15
    score = depth + variety + ratio - min(20, duplicates * 5)

    if word_count < options["min_word_count"]:
        findings.append({"type": "thin_content", "severity": "medium",
                         "message": f"Only {word_count} words of content"})
    if duplicates:
        findings.append({"type": "duplicate_paragraphs", "severity": "low",
                         "message": f"{duplicates} duplicated paragraph(s)"})

    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
