"""
Plugin Loader for PageAudit
Handles discovery, validation and selection of detector and heuristic plugins
"""

import importlib
import inspect
import logging
import pkgutil
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

PLUGIN_KINDS = {
    "detector": {"package": "pageaudit.detectors", "entry": "detect"},
    "heuristic": {"package": "pageaudit.heuristics", "entry": "analyze"},
}

REQUIRED_METADATA = ["id", "name", "family", "kind", "description"]


class PluginError(RuntimeError):
    """Raised when a plugin does not satisfy the plugin contract."""


def validate_plugin(kind: str, name: str, plugin: Any) -> Dict[str, Any]:
    """Check a plugin's METADATA and async entry point; return the metadata."""
    if kind not in PLUGIN_KINDS:
        raise PluginError(f"Unknown plugin kind: {kind}")

    metadata = getattr(plugin, "METADATA", None)
    if not isinstance(metadata, dict):
        raise PluginError(f"Plugin {name} missing METADATA")

    missing = [key for key in REQUIRED_METADATA if key not in metadata]
    if missing:
        raise PluginError(f"Plugin {name} metadata missing fields: {missing}")
    if metadata["kind"] != kind:
        raise PluginError(f"Plugin {name} declares kind {metadata['kind']!r}, expected {kind!r}")
    if kind == "heuristic" and not isinstance(metadata.get("order"), int):
        raise PluginError(f"Heuristic {name} must declare an integer 'order'")

    entry = PLUGIN_KINDS[kind]["entry"]
    func = getattr(plugin, entry, None)
    if func is None:
        raise PluginError(f"Plugin {name} missing {entry} function")
    if not inspect.iscoroutinefunction(func):
        raise PluginError(f"Plugin {name} {entry} function must be async")

    return metadata


class PluginLoader:
    """Loads and manages detector and heuristic plugins."""

    def __init__(self,
                 detector_package: str = "pageaudit.detectors",
                 heuristic_package: str = "pageaudit.heuristics"):
        self.packages = {"detector": detector_package, "heuristic": heuristic_package}
        self.loaded_plugins: Dict[str, Dict[str, Any]] = {"detector": {}, "heuristic": {}}
        self.plugin_metadata: Dict[str, Dict[str, Dict]] = {"detector": {}, "heuristic": {}}
        self.logger = logging.getLogger(__name__)

    def discover_plugins(self, kind: str) -> List[str]:
        """Discover plugin module names in the package for `kind`."""
        package_name = self.packages[kind]
        try:
            package = importlib.import_module(package_name)
        except ImportError as e:
            self.logger.warning(f"Plugin package {package_name} could not be imported: {e}")
            return []

        names = sorted(
            info.name for info in pkgutil.iter_modules(package.__path__)
            if not info.name.startswith("_") and not info.ispkg
        )
        self.logger.debug(f"Discovered {len(names)} {kind} plugins: {names}")
        return names

    def load_plugin(self, kind: str, plugin_name: str) -> bool:
        """Load a single plugin module by name."""
        module_name = f"{self.packages[kind]}.{plugin_name}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            self.logger.error(f"Error loading {kind} plugin {plugin_name}: {e}")
            return False

        try:
            self.register(kind, module, name=plugin_name)
        except PluginError as e:
            self.logger.error(str(e))
            return False
        return True

    def register(self, kind: str, plugin: Any, name: Optional[str] = None) -> str:
        """Register an already-built plugin (module or object); returns its id."""
        metadata = validate_plugin(kind, name or repr(plugin), plugin)
        plugin_id = metadata["id"]
        self.loaded_plugins[kind][plugin_id] = plugin
        self.plugin_metadata[kind][plugin_id] = metadata
        self.logger.debug(f"Registered {kind} plugin: {plugin_id}")
        return plugin_id

    def load_all_plugins(self) -> int:
        """Load all discovered detectors and heuristics."""
        loaded_count = 0
        total = 0
        for kind in PLUGIN_KINDS:
            names = self.discover_plugins(kind)
            total += len(names)
            for plugin_name in names:
                if self.load_plugin(kind, plugin_name):
                    loaded_count += 1

        self.logger.debug(f"Loaded {loaded_count}/{total} plugins")
        return loaded_count

    def get_plugin(self, kind: str, plugin_id: str) -> Optional[Any]:
        """Get a loaded plugin by id."""
        return self.loaded_plugins[kind].get(plugin_id)

    def get_plugin_metadata(self, kind: str, plugin_id: str) -> Optional[Dict]:
        """Get metadata for a specific plugin."""
        return self.plugin_metadata[kind].get(plugin_id)

    def filter_plugins(self,
                       kind: str,
                       family: Optional[str] = None,
                       plugin_list: Optional[List[str]] = None) -> Dict[str, Any]:
        """Filter plugins by family and explicit names.

        Heuristics come back in their declared order; detectors in id order,
        which carries no execution meaning.
        """
        selected = {}
        for plugin_id, plugin in self.loaded_plugins[kind].items():
            metadata = self.plugin_metadata[kind][plugin_id]
            if family and metadata.get("family") != family:
                continue
            if plugin_list is not None and plugin_id not in plugin_list:
                continue
            selected[plugin_id] = plugin

        if kind == "heuristic":
            ordered = sorted(selected, key=lambda pid: (self.plugin_metadata[kind][pid]["order"], pid))
        else:
            ordered = sorted(selected)
        return {pid: selected[pid] for pid in ordered}

    def get_plugin_stats(self) -> Dict[str, Any]:
        """Get statistics about loaded plugins."""
        stats = {
            "total_plugins": sum(len(p) for p in self.loaded_plugins.values()),
            "by_kind": {kind: len(plugins) for kind, plugins in self.loaded_plugins.items()},
            "by_family": {},
        }

        for kind, metadata_map in self.plugin_metadata.items():
            for metadata in metadata_map.values():
                family = metadata.get("family", "unknown")
                stats["by_family"][family] = stats["by_family"].get(family, 0) + 1

        return stats
