"""
PageAudit Utility Modules
HTTP client and logging utilities
"""

from .http_client import HTTPClient
from .logger import PipelineEventLogger, setup_logger

__all__ = [
    "HTTPClient",
    "PipelineEventLogger",
    "setup_logger",
]
