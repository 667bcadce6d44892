"""
Readability Detector for PageAudit
Flesch reading ease, Flesch-Kincaid grade and sentence length distribution
"""

import re
from typing import Any, Dict, List

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "readability",
    "name": "Readability Detector",
    "family": "content",
    "kind": "detector",
    "description": "Reading ease, grade level and sentence complexity",
}

WORD_RE = re.compile(r"[A-Za-z']+")
SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")

DEFAULT_OPTIONS = {
    "target_reading_ease": 65.0,
    "long_sentence_words": 25,
}


def count_syllables(word: str) -> int:
    """Approximate English syllables by vowel groups."""
    word = word.lower().strip("'")
    if not word:
        return 0
    groups = len(VOWEL_GROUP_RE.findall(word))
    if word.endswith("e") and not word.endswith(("le", "ee")) and groups > 1:
        groups -= 1
    return max(1, groups)


def split_sentences(text: str) -> List[str]:
    return [s for s in SENTENCE_SPLIT_RE.split(text) if WORD_RE.search(s)]


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    """Compute readability formulas over the visible text."""
    options = {**DEFAULT_OPTIONS, **(config or {})}
    text = document.text()
    sentences = split_sentences(text)
    words = WORD_RE.findall(text)

    if not words or not sentences:
        return DetectorResult(
            score=0.0,
            metrics={"word_count": 0, "sentence_count": 0},
            findings=[{"type": "no_text", "severity": "high", "message": "No readable text found"}],
        )

    syllables = sum(count_syllables(w) for w in words)
    words_per_sentence = len(words) / len(sentences)
    syllables_per_word = syllables / len(words)
    reading_ease = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    grade_level = 0.39 * words_per_sentence + 11.8 * syllables_per_word - 15.59
    long_sentences = sum(1 for s in sentences if len(WORD_RE.findall(s)) > options["long_sentence_words"])
    long_ratio = long_sentences / len(sentences)

    metrics = {
        "word_count": len(words),
        "sentence_count": len(sentences),
        "flesch_reading_ease": round(reading_ease, 1),
        "flesch_kincaid_grade": round(max(0.0, grade_level), 1),
        "avg_words_per_sentence": round(words_per_sentence, 1),
        "avg_syllables_per_word": round(syllables_per_word, 2),
        "long_sentence_ratio": round(long_ratio, 3),
    }

    findings = []
    if reading_ease < 50:
        findings.append({"type": "difficult_text", "severity": "medium",
                         "message": f"Reading ease {metrics['flesch_reading_ease']} is difficult for most readers"})
    if long_ratio > 0.25:
        findings.append({"type": "long_sentences", "severity": "low",
                         "message": f"{long_sentences} sentences exceed {options['long_sentence_words']} words"})

    distance = abs(reading_ease - options["target_reading_ease"])
    score = 100 - distance * 1.2 - long_ratio * 30
    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
