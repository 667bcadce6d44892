import inspect
from types import SimpleNamespace

import pytest

from conftest import make_detector, make_heuristic
from pageaudit.core.plugin_loader import PluginError, PluginLoader, validate_plugin
from pageaudit.detectors import AVAILABLE_DETECTORS


def test_plugins_have_metadata_and_entry_points():
    loader = PluginLoader()
    count = loader.load_all_plugins()
    assert count == 11
    for kind, entry in (("detector", "detect"), ("heuristic", "analyze")):
        for name, module in loader.loaded_plugins[kind].items():
            assert module.METADATA["kind"] == kind
            assert module.METADATA["id"] == name
            assert inspect.iscoroutinefunction(getattr(module, entry))


def test_available_detectors_match_discovery():
    loader = PluginLoader()
    assert sorted(AVAILABLE_DETECTORS) == loader.discover_plugins("detector")


def test_family_filter_orders_heuristics():
    loader = PluginLoader()
    loader.load_all_plugins()

    content = loader.filter_plugins("heuristic", family="content")
    assert list(content) == ["content_optimization", "content_performance", "content_strategy"]
    assert list(loader.filter_plugins("heuristic", family="resource")) == ["resource_strategy"]
    assert "resource_loading" not in loader.filter_plugins("detector", family="content")


def test_register_and_stats():
    loader = PluginLoader()
    loader.register("detector", make_detector("det_a"))
    loader.register("heuristic", make_heuristic("h_a", order=1))

    stats = loader.get_plugin_stats()
    assert stats["total_plugins"] == 2
    assert stats["by_family"] == {"test": 2}
    assert loader.get_plugin_metadata("heuristic", "h_a")["order"] == 1


@pytest.mark.parametrize("kind,plugin", [
    ("detector", SimpleNamespace()),
    ("detector", SimpleNamespace(METADATA={"id": "x"})),
    ("heuristic", make_detector("x")),
    ("detector", SimpleNamespace(METADATA=make_detector("x").METADATA, detect=lambda d, c: None)),
    ("heuristic", SimpleNamespace(METADATA={**make_heuristic("x", 1).METADATA, "order": "first"},
                                  analyze=make_heuristic("x", 1).analyze)),
])
def test_invalid_plugins_rejected(kind, plugin):
    with pytest.raises(PluginError):
        validate_plugin(kind, "x", plugin)
