"""
Analyzer profiles for PageAudit
A profile binds one analyzer family to its plugins, rule set and combine
dimensions, so a new scoring domain is a new profile rather than new code
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import ConfigurationError
from .rules_engine import COMPARATORS, RuleCategory


@dataclass(frozen=True)
class Dimension:
    """One combined score dimension.

    Contributions come from a detector sub-score, a heuristic judgment value
    (dotted `<heuristic>.<key>` name, or `<heuristic>.score`) and a rule
    category score; any that are missing are left out of the mean.
    """

    name: str
    title: str
    detector: Optional[str] = None
    heuristic_metric: Optional[str] = None
    rule_category: Optional[str] = None
    detector_weight: float = 0.4
    heuristic_weight: float = 0.3
    rules_weight: float = 0.3
    weight: float = 1.0
    positive_message: str = ""
    improvement_message: str = ""
    actions: tuple = ()


@dataclass(frozen=True)
class IssueCheck:
    """Raises an issue when `<metric> <op> <threshold>` holds."""

    metric: str
    op: str
    threshold: Any
    issue_type: str
    severity: str
    message: str

    def __post_init__(self) -> None:
        if self.op not in COMPARATORS:
            raise ConfigurationError(f"Issue check {self.issue_type}: unknown operator {self.op!r}")

    def triggered(self, value: Any) -> bool:
        return bool(COMPARATORS[self.op](value, self.threshold))


@dataclass
class AnalyzerProfile:
    """Everything the engine needs to run one analyzer family.

    `detectors` / `heuristics` left as None select every loaded plugin of
    the profile's family; heuristics then run in their metadata order.
    """

    name: str
    family: str
    description: str = ""
    version: str = "1.0.0"
    detectors: Optional[List[str]] = None
    heuristics: Optional[List[str]] = None
    rule_categories: List[RuleCategory] = field(default_factory=list)
    category_weights: Dict[str, float] = field(default_factory=dict)
    effort_table: Dict[str, str] = field(default_factory=dict)
    score_gain_table: Dict[str, float] = field(default_factory=dict)
    dimensions: List[Dimension] = field(default_factory=list)
    issue_checks: List[IssueCheck] = field(default_factory=list)
    inventory: Dict[str, str] = field(default_factory=dict)


def content_profile() -> AnalyzerProfile:
    from ..rules import content_rules

    return AnalyzerProfile(
        name="content",
        family="content",
        description="Content structure, quality, readability, SEO, multimedia and engagement",
        rule_categories=content_rules.build_categories(),
        category_weights=dict(content_rules.CATEGORY_WEIGHTS),
        effort_table=dict(content_rules.EFFORT_TABLE),
        score_gain_table=dict(content_rules.SCORE_GAIN_TABLE),
        dimensions=[
            Dimension("content_structure", "Content Structure",
                      detector="content_structure",
                      heuristic_metric="content_optimization.structure_optimization",
                      rule_category="structure_rules", weight=0.2,
                      positive_message="Well-organized content structure with a clear hierarchy",
                      improvement_message="Content structure needs a clearer heading hierarchy",
                      actions=("Use a single H1 heading", "Avoid skipping heading levels",
                               "Wrap content in semantic landmarks")),
            Dimension("content_quality", "Content Quality",
                      detector="content_quality",
                      heuristic_metric="content_performance.quality_performance",
                      rule_category="quality_rules", weight=0.25,
                      positive_message="High-quality, in-depth content",
                      improvement_message="Content is thin or repetitive",
                      actions=("Expand content to at least 300 words", "Remove duplicated paragraphs")),
            Dimension("readability", "Readability",
                      detector="readability",
                      heuristic_metric="content_strategy.readability_strategy",
                      rule_category="readability_rules", weight=0.15,
                      positive_message="Text is easy to read",
                      improvement_message="Text is hard to read",
                      actions=("Shorten long sentences", "Prefer simpler words")),
            Dimension("seo_content", "SEO Content",
                      detector="seo_content",
                      heuristic_metric="content_optimization.seo_optimization",
                      rule_category="seo_rules", weight=0.2,
                      positive_message="On-page SEO signals are strong",
                      improvement_message="On-page SEO signals are missing",
                      actions=("Write a descriptive title and meta description",
                               "Declare a canonical URL", "Link to related pages")),
            Dimension("multimedia", "Multimedia",
                      detector="multimedia",
                      heuristic_metric="content_performance.multimedia_performance",
                      rule_category="multimedia_rules", weight=0.1,
                      positive_message="Media is accessible and well used",
                      improvement_message="Media is missing or inaccessible",
                      actions=("Add alt text to every image", "Use responsive images")),
            Dimension("engagement", "Engagement",
                      detector="engagement",
                      heuristic_metric="content_strategy.engagement_strategy",
                      rule_category="engagement_rules", weight=0.1,
                      positive_message="Page invites the reader to act",
                      improvement_message="Page gives readers little to act on",
                      actions=("Add a clear call to action", "Offer interactive elements")),
        ],
        issue_checks=[
            IssueCheck("content_quality.word_count", "<", 300, "thin_content", "medium",
                       "Content has fewer than 300 words"),
            IssueCheck("content_structure.heading_count", "==", 0, "no_headings", "high",
                       "Page has no headings"),
            IssueCheck("multimedia.images_missing_alt", ">", 0, "missing_alt_text", "medium",
                       "Images are missing alt text"),
            IssueCheck("seo_content.title_length", "==", 0, "missing_title", "high",
                       "Page has no title"),
        ],
        inventory={
            "word_count": "content_quality.word_count",
            "heading_count": "content_structure.heading_count",
            "paragraph_count": "content_structure.paragraph_count",
            "link_count": "content_structure.link_count",
            "image_count": "multimedia.image_count",
            "video_count": "multimedia.video_count",
            "form_count": "engagement.form_count",
        },
    )


def resource_profile() -> AnalyzerProfile:
    from ..rules import resource_rules

    return AnalyzerProfile(
        name="resource",
        family="resource",
        description="Resource loading budget, optimization and critical path",
        rule_categories=resource_rules.build_categories(),
        category_weights=dict(resource_rules.CATEGORY_WEIGHTS),
        effort_table=dict(resource_rules.EFFORT_TABLE),
        score_gain_table=dict(resource_rules.SCORE_GAIN_TABLE),
        dimensions=[
            Dimension("performance_budget", "Performance Budget",
                      detector="resource_loading", rule_category="performance_budget",
                      detector_weight=0.3, rules_weight=0.7, weight=0.3,
                      positive_message="Resource counts are within budget",
                      improvement_message="Page requests too many resources",
                      actions=("Bundle scripts and stylesheets", "Remove unused third-party tags")),
            Dimension("optimization", "Optimization",
                      rule_category="optimization", weight=0.25,
                      positive_message="Resources are loaded efficiently",
                      improvement_message="Resource loading is not optimized",
                      actions=("Lazy-load offscreen images", "Add preconnect hints")),
            Dimension("critical_resource", "Critical Resources",
                      heuristic_metric="resource_strategy.score", rule_category="critical_resource",
                      heuristic_weight=0.4, rules_weight=0.6, weight=0.25,
                      positive_message="Critical rendering path is short",
                      improvement_message="Render-blocking resources delay first paint",
                      actions=("Defer non-critical scripts", "Inline critical CSS")),
            Dimension("loading_performance", "Loading Performance",
                      rule_category="loading_performance", weight=0.15,
                      positive_message="Loading strategy is sound",
                      improvement_message="Loading strategy needs work",
                      actions=("Reduce the critical path", "Stay within the resource budget")),
        ],
        issue_checks=[
            IssueCheck("resource_loading.render_blocking_resources", ">", 0, "render_blocking", "high",
                       "Render-blocking resources in <head>"),
            IssueCheck("resource_loading.third_party_domains", ">", 5, "third_party_sprawl", "medium",
                       "Resources come from many third-party origins"),
        ],
        inventory={
            "scripts": "resource_loading.script_count",
            "stylesheets": "resource_loading.stylesheet_count",
            "images": "resource_loading.image_count",
            "third_party_domains": "resource_loading.third_party_domains",
            "total_resources": "resource_loading.total_resource_count",
        },
    )


PROFILES: Dict[str, Callable[[], AnalyzerProfile]] = {
    "content": content_profile,
    "resource": resource_profile,
}


def get_profile(name: str) -> AnalyzerProfile:
    """Build a fresh built-in profile by name."""
    factory = PROFILES.get(name)
    if factory is None:
        raise ConfigurationError(f"Unknown analyzer profile {name!r}; available: {sorted(PROFILES)}")
    return factory()
