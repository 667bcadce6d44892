"""
PageAudit
Multi-phase page quality analysis framework

Runs independent detectors concurrently over a parsed document, feeds their
output to ordered heuristics, scores everything through a declarative rules
engine and folds the result into one graded, recommendation-bearing report.
"""

import logging

__version__ = "1.0.0"
__author__ = "PageAudit Team"
__description__ = "Multi-phase page quality analysis framework"

logging.getLogger(__name__).addHandler(logging.NullHandler())
