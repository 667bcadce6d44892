"""
PageAudit Heuristic Plugins
Order-dependent analyzers producing judgments from detector output
"""

from . import (
    content_optimization,
    content_performance,
    content_strategy,
    resource_strategy,
)

__all__ = [
    "content_optimization",
    "content_performance",
    "content_strategy",
    "resource_strategy",
]
