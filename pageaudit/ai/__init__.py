"""
PageAudit Enhancement
Pluggable refinement of the final score
"""

from .enhancer import ScoreCalibrator

__all__ = ["ScoreCalibrator"]
