"""
Shared fixtures for the PageAudit test suite
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from pageaudit.core.document import Document
from pageaudit.core.model import DetectorResult, HeuristicResult
from pageaudit.core.plugin_loader import PluginLoader
from pageaudit.core.profiles import AnalyzerProfile, Dimension
from pageaudit.core.rules_engine import build_category
from pageaudit.utils.logger import PipelineEventLogger

SAMPLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <title>Guide to Growing Tomatoes at Home - Garden Notes</title>
    <meta name="description" content="A practical guide to growing tomatoes at home: soil, watering, sunlight and harvest tips for beginners and experienced gardeners alike.">
    <link rel="canonical" href="https://garden.example.com/tomatoes">
    <link rel="stylesheet" href="https://garden.example.com/site.css">
    <script src="https://cdn.example.net/analytics.js"></script>
    <script src="/app.js" defer></script>
</head>
<body>
    <header><nav><a href="/">Home</a> <a href="/herbs">Herbs</a> <a href="/soil">Soil</a></nav></header>
    <main>
        <article>
            <h1>Growing Tomatoes</h1>
            <p>Tomatoes need plenty of sun. Plant them where they get eight hours of light. Water them at the base.</p>
            <h2>Soil</h2>
            <p>Use rich soil with compost. Keep it moist but not wet. Add mulch to hold water.</p>
            <img src="/img/tomato.jpg" alt="Ripe tomatoes on the vine" loading="lazy">
            <img src="/img/soil.jpg">
            <h4>Skipped level</h4>
            <p>Pick the fruit when it is red and firm. Do you want more tips?</p>
            <a href="/signup">Sign up for our newsletter</a>
            <a href="https://twitter.com/gardennotes">Follow us</a>
            <form><input type="email" name="email"><button>Subscribe</button></form>
        </article>
    </main>
</body>
</html>
"""


@pytest.fixture
def sample_document():
    return Document.from_html(SAMPLE_HTML, url="https://garden.example.com/tomatoes")


def make_detector(name, score=80.0, metrics=None, family="test", error=None,
                  delay=0.0, calls=None, result=None):
    """Build an in-memory detector plugin."""

    async def detect(document, config):
        if calls is not None:
            calls.append(name)
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        if result is not None:
            return result
        return DetectorResult(score=score, metrics=dict(metrics or {}))

    return SimpleNamespace(
        METADATA={"id": name, "name": name, "family": family, "kind": "detector",
                  "description": f"test detector {name}"},
        detect=detect,
    )


def make_heuristic(name, order, analyze=None, family="test", score=70.0):
    """Build an in-memory heuristic plugin; `analyze` overrides the default body."""

    async def default_analyze(detection, context, config):
        return HeuristicResult(score=score, judgment={"seen": list(context.heuristics)})

    return SimpleNamespace(
        METADATA={"id": name, "name": name, "family": family, "kind": "heuristic",
                  "order": order, "description": f"test heuristic {name}"},
        analyze=analyze or default_analyze,
    )


@pytest.fixture
def loader():
    """Plugin loader with nothing discovered; tests register their own plugins."""
    return PluginLoader()


@pytest.fixture
def test_profile():
    return AnalyzerProfile(
        name="test",
        family="test",
        rule_categories=[
            build_category("alpha", [
                {"name": "alpha_score", "metric": "det_a.score", "op": ">=", "threshold": 50},
                {"name": "alpha_words", "metric": "det_a.words", "op": ">=", "threshold": 100,
                 "impact": "high"},
            ]),
        ],
        category_weights={"alpha": 1.0},
        dimensions=[Dimension("alpha", "Alpha", detector="det_a", rule_category="alpha")],
    )


@pytest.fixture
def events():
    return MagicMock(spec=PipelineEventLogger)
