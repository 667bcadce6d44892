"""
Multimedia Detector for PageAudit
Images, video and audio usage, alt text coverage and responsive delivery
"""

from typing import Any, Dict

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult
from pageaudit.core.scoring import clamp_score


METADATA = {
    "id": "multimedia",
    "name": "Multimedia Detector",
    "family": "content",
    "kind": "detector",
    "description": "Image alt coverage, responsive and lazy images, video and audio",
}


async def detect(document: Document, config: Dict[str, Any]) -> DetectorResult:
    images = document.select("img")
    missing_alt = sum(1 for img in images if not img.has_attr("alt"))
    image_count = len(images)
    alt_coverage = (image_count - missing_alt) / image_count if image_count else 1.0

    metrics = {
        "image_count": image_count,
        "images_missing_alt": missing_alt,
        "alt_coverage": round(alt_coverage, 3),
        "responsive_images": sum(1 for img in images if img.has_attr("srcset")) + document.count("picture"),
        "lazy_images": sum(1 for img in images if (img.attr("loading") or "").lower() == "lazy"),
        "figure_count": document.count("figure"),
        "video_count": document.count("video") + document.count('iframe[src*="youtube"], iframe[src*="vimeo"]'),
        "audio_count": document.count("audio"),
    }

    findings = []
    if missing_alt:
        findings.append({"type": "missing_alt", "severity": "medium",
                         "message": f"{missing_alt} image(s) without alt text"})

    if image_count == 0 and metrics["video_count"] == 0:
        score = 50.0
        findings.append({"type": "no_media", "severity": "low", "message": "Page has no images or video"})
    else:
        score = 60 + alt_coverage * 25
        if image_count:
            score += 10 * (metrics["responsive_images"] / image_count)
        if metrics["figure_count"]:
            score += 5

    return DetectorResult(score=round(clamp_score(score), 1), metrics=metrics, findings=findings)
