"""Detector registry — every detector factory known to this process.

The registry is built once, normally by ``load_registry`` scanning a plugin
directory, and is read-only afterwards. It is an ordinary object handed to
the engine explicitly; there is no module-level registry.

Registration order is significant: with no explicit selection, detectors
run in the order their factories were registered.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional

from ..exceptions import DuplicateDetectorError, UnknownDetectorError
from ..logging_config import get_logger
from ..models import BugCode, BugPattern
from .base import DetectorFactory

logger = get_logger(__name__)


class PatternCatalog:
    """Bug patterns and bug codes contributed by plugin bundles."""

    def __init__(self) -> None:
        self._patterns: dict[str, BugPattern] = {}
        self._codes: dict[str, BugCode] = {}

    def register_pattern(self, pattern: BugPattern) -> None:
        if pattern.type in self._patterns:
            logger.debug(f"Bug pattern {pattern.type} redefined")
        self._patterns[pattern.type] = pattern

    def register_code(self, code: BugCode) -> None:
        if code.abbrev in self._codes:
            logger.debug(f"Bug code {code.abbrev} redefined")
        self._codes[code.abbrev] = code

    def pattern(self, type_: str) -> Optional[BugPattern]:
        return self._patterns.get(type_)

    def code(self, abbrev: str) -> Optional[BugCode]:
        return self._codes.get(abbrev)

    def short_description(self, type_: str) -> str:
        """Human-readable description for a bug type, falling back to the type."""
        pattern = self._patterns.get(type_)
        if pattern is None or not pattern.short_description:
            return type_
        return pattern.short_description

    @property
    def patterns(self) -> list[BugPattern]:
        return list(self._patterns.values())

    @property
    def codes(self) -> list[BugCode]:
        return list(self._codes.values())


class DetectorRegistry:
    """Ordered, name-unique collection of detector factories."""

    def __init__(
        self,
        factories: Iterable[DetectorFactory] = (),
        catalog: Optional[PatternCatalog] = None,
        plugins: Iterable[str] = (),
    ):
        self._factories: list[DetectorFactory] = []
        self._by_name: dict[str, DetectorFactory] = {}
        self._names_by_factory: dict[int, str] = {}
        self.catalog = catalog or PatternCatalog()
        self.plugins: tuple[str, ...] = tuple(plugins)
        for factory in factories:
            self._register(factory)

    def _register(self, factory: DetectorFactory) -> None:
        if factory.name in self._by_name:
            raise DuplicateDetectorError(factory.name, factory.plugin_id or None)
        self._factories.append(factory)
        self._by_name[factory.name] = factory
        self._names_by_factory[id(factory)] = factory.name

    @property
    def factories(self) -> tuple[DetectorFactory, ...]:
        return tuple(self._factories)

    def lookup(self, name: str) -> Optional[DetectorFactory]:
        return self._by_name.get(name)

    def get(self, name: str) -> DetectorFactory:
        factory = self._by_name.get(name)
        if factory is None:
            raise UnknownDetectorError(name)
        return factory

    def name_of(self, factory: DetectorFactory) -> Optional[str]:
        return self._names_by_factory.get(id(factory))

    def names(self) -> list[str]:
        return [f.name for f in self._factories]

    def enabled(self) -> list[DetectorFactory]:
        return [f for f in self._factories if f.enabled_by_default]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._factories)

    def __iter__(self) -> Iterator[DetectorFactory]:
        return iter(self._factories)

    def __repr__(self) -> str:
        return f"DetectorRegistry({len(self)} detectors, plugins={list(self.plugins)})"


class RegistryBuilder:
    """Accumulates bundles and produces a read-only DetectorRegistry."""

    def __init__(self) -> None:
        self._factories: list[DetectorFactory] = []
        self._names: set[str] = set()
        self._catalog = PatternCatalog()
        self._plugins: list[str] = []

    def register(self, factory: DetectorFactory) -> RegistryBuilder:
        """Append a factory. Duplicate names fail fast."""
        if factory.name in self._names:
            raise DuplicateDetectorError(factory.name, factory.plugin_id or None)
        self._names.add(factory.name)
        self._factories.append(factory)
        return self

    def add_pattern(self, pattern: BugPattern) -> RegistryBuilder:
        self._catalog.register_pattern(pattern)
        return self

    def add_code(self, code: BugCode) -> RegistryBuilder:
        self._catalog.register_code(code)
        return self

    def add_bundle(self, bundle) -> RegistryBuilder:
        """Register everything a loaded PluginBundle (or bundle-like module) declares."""
        from .plugins import PluginBundle

        if not isinstance(bundle, PluginBundle):
            bundle = PluginBundle.from_namespace(bundle)
        for factory in bundle.detectors:
            self.register(factory)
        for pattern in bundle.patterns:
            self.add_pattern(pattern)
        for code in bundle.codes:
            self.add_code(code)
        self._plugins.append(bundle.plugin_id)
        logger.debug(
            f"Registered plugin {bundle.plugin_id}: {len(bundle.detectors)} detectors, "
            f"{len(bundle.patterns)} patterns, {len(bundle.codes)} codes"
        )
        return self

    def build(self) -> DetectorRegistry:
        return DetectorRegistry(self._factories, catalog=self._catalog, plugins=self._plugins)
