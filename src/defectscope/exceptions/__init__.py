"""Exception hierarchy for defectscope."""

from .analysis import (
    AnalysisCancelled,
    AnalysisError,
    DecodeError,
    IngestionError,
    PluginLoadError,
    UnitAnalysisError,
    UnitNotFoundError,
)
from .base import DefectScopeError
from .config import (
    ConfigurationError,
    DetectorSelectionError,
    DuplicateDetectorError,
    DuplicateOmitError,
    FilterError,
    InvalidConfigError,
    PluginDirectoryError,
    UnknownDetectorError,
)

__all__ = [
    "DefectScopeError",
    "AnalysisError",
    "AnalysisCancelled",
    "DecodeError",
    "IngestionError",
    "PluginLoadError",
    "UnitAnalysisError",
    "UnitNotFoundError",
    "ConfigurationError",
    "DetectorSelectionError",
    "DuplicateDetectorError",
    "DuplicateOmitError",
    "FilterError",
    "InvalidConfigError",
    "PluginDirectoryError",
    "UnknownDetectorError",
]
