"""
Resource rule set for PageAudit
Performance budget, optimization and critical resource checks
"""

from typing import List

from pageaudit.core.rules_engine import RuleCategory, build_category

CATEGORY_SPECS = {
    "performance_budget": [
        {"name": "resource_count_budget", "metric": "resource_loading.total_resource_count", "op": "<=",
         "threshold": 50, "weight": 1.0, "impact": "high", "description": "At most 50 requested resources"},
        {"name": "script_count_budget", "metric": "resource_loading.script_count", "op": "<=", "threshold": 15,
         "weight": 0.8, "impact": "medium", "description": "At most 15 external scripts"},
        {"name": "stylesheet_count_budget", "metric": "resource_loading.stylesheet_count", "op": "<=",
         "threshold": 5, "weight": 0.6, "impact": "medium", "description": "At most 5 stylesheets"},
        {"name": "third_party_budget", "metric": "resource_loading.third_party_domains", "op": "<=",
         "threshold": 5, "weight": 0.6, "impact": "medium", "description": "At most 5 third-party origins"},
    ],
    "optimization": [
        {"name": "lazy_loading_images", "metric": "resource_loading.lazy_image_ratio", "op": ">=",
         "threshold": 0.5, "weight": 0.8, "impact": "medium", "description": "Most images are lazy-loaded"},
        {"name": "inline_script_size", "metric": "resource_loading.inline_script_bytes", "op": "<=",
         "threshold": 20000, "weight": 0.5, "impact": "low", "description": "Inline scripts stay under 20KB"},
        {"name": "resource_hints", "metric": "resource_loading.preconnect_hints", "op": ">=", "threshold": 1,
         "weight": 0.4, "impact": "low", "description": "Preconnect or dns-prefetch hints are declared"},
    ],
    "critical_resource": [
        {"name": "render_blocking_resources", "metric": "resource_loading.render_blocking_resources",
         "op": "==", "threshold": 0, "weight": 1.0, "impact": "high",
         "description": "No render-blocking resources in <head>"},
        {"name": "critical_css_inlined", "metric": "resource_loading.critical_css_inlined", "op": "==",
         "threshold": True, "weight": 0.6, "impact": "medium", "description": "Critical CSS is inlined"},
        {"name": "critical_preload", "metric": "resource_loading.preload_hints", "op": ">=", "threshold": 1,
         "weight": 0.4, "impact": "low", "description": "Critical resources are preloaded"},
    ],
    "loading_performance": [
        {"name": "critical_path_length", "metric": "resource_strategy.critical_path_length", "op": "<=",
         "threshold": 2, "weight": 1.0, "impact": "high", "description": "Critical path has at most 2 blocking resources"},
        {"name": "budget_utilization", "metric": "resource_strategy.budget_utilization", "op": "<=",
         "threshold": 1.0, "weight": 0.6, "impact": "medium", "description": "Resource budget is not exceeded"},
    ],
}

CATEGORY_WEIGHTS = {
    "performance_budget": 0.3,
    "optimization": 0.25,
    "critical_resource": 0.25,
    "loading_performance": 0.15,
    "compression": 0.05,
}

EFFORT_TABLE = {
    "render_blocking_resources": "high",
    "critical_css_inlined": "medium",
    "lazy_loading_images": "low",
    "resource_hints": "low",
    "critical_preload": "low",
    "resource_count_budget": "high",
    "third_party_budget": "medium",
    "script_count_budget": "medium",
}

SCORE_GAIN_TABLE = {
    "render_blocking_resources": 15.0,
    "critical_css_inlined": 10.0,
    "lazy_loading_images": 8.0,
    "resource_count_budget": 12.0,
}


def build_categories() -> List[RuleCategory]:
    return [build_category(name, specs) for name, specs in CATEGORY_SPECS.items()]
