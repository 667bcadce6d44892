"""
PageAudit Rule Sets
Declarative rule specifications per analyzer family
"""

from . import content_rules, resource_rules

__all__ = ["content_rules", "resource_rules"]
