"""
PageAudit Core Components
Orchestration, rules evaluation, plugin loading, caching and result management
"""

from .cache import ResultCache
from .config import AnalyzerConfig, ConfigurationError, load_config
from .document import Document, DocumentError
from .engine import AnalysisContext, AnalysisEngine
from .model import AnalysisReport, AnalysisTarget, DetectorResult, EnhancementResult, HeuristicResult
from .plugin_loader import PluginError, PluginLoader
from .profiles import AnalyzerProfile, get_profile
from .result_manager import ResultManager
from .rules_engine import Rule, RuleCategory, RulesEngine

__all__ = [
    "AnalysisContext",
    "AnalysisEngine",
    "AnalysisReport",
    "AnalysisTarget",
    "AnalyzerConfig",
    "AnalyzerProfile",
    "ConfigurationError",
    "DetectorResult",
    "Document",
    "DocumentError",
    "EnhancementResult",
    "HeuristicResult",
    "PluginError",
    "PluginLoader",
    "ResultCache",
    "ResultManager",
    "Rule",
    "RuleCategory",
    "RulesEngine",
    "get_profile",
    "load_config",
]
