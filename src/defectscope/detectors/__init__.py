"""Detector plugin API: the capability interface, registry, discovery and selection."""

from .base import Detector, DetectorFactory
from .plugins import PluginBundle, discover_bundles, load_bundle, load_registry
from .registry import DetectorRegistry, PatternCatalog, RegistryBuilder
from .selection import (
    ActiveDetectorSet,
    SelectionMode,
    SelectionSpec,
    parse_detector_list,
    select_detectors,
)

__all__ = [
    "Detector",
    "DetectorFactory",
    "DetectorRegistry",
    "PatternCatalog",
    "RegistryBuilder",
    "PluginBundle",
    "discover_bundles",
    "load_bundle",
    "load_registry",
    "ActiveDetectorSet",
    "SelectionMode",
    "SelectionSpec",
    "parse_detector_list",
    "select_detectors",
]
