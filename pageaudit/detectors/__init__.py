"""
PageAudit Detector Plugins
Independent units extracting metrics and a sub-score from one document
"""

from . import (
    content_quality,
    content_structure,
    engagement,
    multimedia,
    readability,
    resource_loading,
    seo_content,
)

__all__ = [
    "content_quality",
    "content_structure",
    "engagement",
    "multimedia",
    "readability",
    "resource_loading",
    "seo_content",
]

# Plugin metadata for discovery
AVAILABLE_DETECTORS = {
    module.METADATA["id"]: module.METADATA["description"]
    for module in (
        content_quality,
        content_structure,
        engagement,
        multimedia,
        readability,
        resource_loading,
        seo_content,
    )
}
