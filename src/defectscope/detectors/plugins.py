"""Plugin bundle discovery.

A plugin directory holds bundles. A bundle is either a Python module file
(``nullness.py``) or a package directory (``nullness/__init__.py``). Each
bundle exposes::

    PLUGIN_ID = "nullness"             # optional, defaults to the bundle name
    DETECTORS = [DetectorFactory(...)]  # required
    BUG_PATTERNS = [BugPattern(...)]    # optional
    BUG_CODES = [BugCode(...)]          # optional

Bundles are loaded in sorted name order. A bundle that fails to import or
declares malformed contents is logged and skipped; a missing plugin
directory is fatal.
"""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from ..exceptions import PluginDirectoryError, PluginLoadError
from ..logging_config import get_logger
from ..models import BugCode, BugPattern
from .base import DetectorFactory
from .registry import DetectorRegistry, RegistryBuilder

logger = get_logger(__name__)

_MODULE_PREFIX = "defectscope_plugin"


@dataclass(frozen=True)
class PluginBundle:
    """Everything one bundle contributes, validated but not yet registered."""

    plugin_id: str
    detectors: tuple[DetectorFactory, ...]
    patterns: tuple[BugPattern, ...] = ()
    codes: tuple[BugCode, ...] = ()
    path: Optional[Path] = None

    @classmethod
    def from_namespace(cls, namespace: Any, default_id: str = "", path: Optional[Path] = None):
        """Extract bundle contents from a module (or any object with the attributes)."""
        where = path or Path(default_id or getattr(namespace, "__name__", "<bundle>"))
        plugin_id = getattr(namespace, "PLUGIN_ID", None) or default_id
        if not plugin_id:
            plugin_id = getattr(namespace, "__name__", "").rpartition(".")[2]
        if not plugin_id:
            raise PluginLoadError(where, "bundle has no PLUGIN_ID")

        detectors = getattr(namespace, "DETECTORS", None)
        if detectors is None:
            raise PluginLoadError(where, "bundle does not define DETECTORS")

        factories = _typed_tuple(detectors, DetectorFactory, "DETECTORS", where)
        return cls(
            plugin_id=plugin_id,
            detectors=tuple(f.with_plugin(plugin_id) for f in factories),
            patterns=_typed_tuple(getattr(namespace, "BUG_PATTERNS", ()), BugPattern, "BUG_PATTERNS", where),
            codes=_typed_tuple(getattr(namespace, "BUG_CODES", ()), BugCode, "BUG_CODES", where),
            path=path,
        )


def _typed_tuple(values: Any, expected: type, attr: str, where: Path) -> tuple:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise PluginLoadError(where, f"{attr} must be a list of {expected.__name__}")
    items = tuple(values)
    for item in items:
        if not isinstance(item, expected):
            raise PluginLoadError(
                where, f"{attr} contains {type(item).__name__}, expected {expected.__name__}"
            )
    return items


def _bundle_entry(path: Path) -> Optional[Path]:
    """Return the file to import for a plugin directory entry, or None to skip it."""
    if path.name.startswith((".", "_")):
        return None
    if path.is_file() and path.suffix == ".py":
        return path
    if path.is_dir() and (path / "__init__.py").is_file():
        return path / "__init__.py"
    return None


def _import_bundle(path: Path, source: Path) -> ModuleType:
    module_name = f"{_MODULE_PREFIX}_{path.stem}"
    search = [str(path)] if source.name == "__init__.py" else None
    spec = importlib.util.spec_from_file_location(
        module_name, source, submodule_search_locations=search
    )
    if spec is None or spec.loader is None:
        raise PluginLoadError(path, "not an importable module")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise PluginLoadError(path, f"{type(e).__name__}: {e}") from e
    return module


def load_bundle(path: Path) -> PluginBundle:
    """Import one bundle and validate its declarations.

    Raises:
        PluginLoadError: If the bundle cannot be imported or is malformed
    """
    path = Path(path)
    source = _bundle_entry(path)
    if source is None:
        raise PluginLoadError(path, "not a plugin module or package")
    module = _import_bundle(path, source)
    return PluginBundle.from_namespace(module, default_id=path.stem, path=path)


def discover_bundles(plugin_dir: Path) -> list[PluginBundle]:
    """Load every bundle in ``plugin_dir``, skipping the ones that fail.

    Raises:
        PluginDirectoryError: If ``plugin_dir`` is missing or unreadable
    """
    plugin_dir = Path(plugin_dir)
    if not plugin_dir.is_dir():
        raise PluginDirectoryError(plugin_dir, "not a directory")
    try:
        entries = sorted(plugin_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise PluginDirectoryError(plugin_dir, str(e)) from e

    bundles: list[PluginBundle] = []
    for entry in entries:
        if _bundle_entry(entry) is None:
            logger.debug(f"Ignoring {entry} in plugin directory")
            continue
        try:
            bundles.append(load_bundle(entry))
        except PluginLoadError as e:
            logger.warning(f"Could not load plugin {entry}: {e.reason}")
    return bundles


def load_registry(plugin_dir: Path, extra_bundles: Iterable[Any] = ()) -> DetectorRegistry:
    """Build the process registry from a plugin directory.

    ``extra_bundles`` (modules or PluginBundle objects) are registered after
    the directory's bundles. Duplicate detector names raise
    DuplicateDetectorError.
    """
    builder = RegistryBuilder()
    bundles = discover_bundles(plugin_dir)
    for bundle in bundles:
        builder.add_bundle(bundle)
    for extra in extra_bundles:
        builder.add_bundle(extra)
    registry = builder.build()
    logger.info(
        f"Loaded {len(registry.plugins)} plugins with {len(registry)} detectors from {plugin_dir}"
    )
    return registry
