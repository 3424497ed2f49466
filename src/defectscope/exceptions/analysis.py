"""Analysis-related exceptions: ingestion, decoding, detectors, cancellation."""

from pathlib import Path
from typing import Optional

from .base import DefectScopeError


class AnalysisError(DefectScopeError):
    """Base class for analysis-related errors."""

    pass


class DecodeError(AnalysisError):
    """Raised by a decoder when raw bytes are not a valid program unit."""

    def __init__(self, source_name: str, reason: str):
        super().__init__(
            f"Cannot decode {source_name}",
            details={"source": source_name, "reason": reason},
        )
        self.source_name = source_name
        self.reason = reason


class IngestionError(AnalysisError):
    """Raised when an input cannot be read or one of its units cannot be decoded."""

    def __init__(self, path: Path, reason: str, entry: Optional[str] = None):
        super().__init__(
            f"Could not analyze {path}",
            details={"path": path, "reason": reason, "entry": entry},
        )
        self.path = path
        self.entry = entry
        self.reason = reason


class UnitNotFoundError(AnalysisError):
    """Raised when a unit name cannot be resolved from the repository."""

    def __init__(self, name: str):
        super().__init__(
            f"Could not find unit {name} in repository", details={"unit": name}
        )
        self.name = name


class UnitAnalysisError(AnalysisError):
    """Raised by a detector that cannot make sense of one particular unit.

    The pipeline logs it to the bug reporter and moves on to the next
    detector.
    """

    def __init__(self, message: str, unit: Optional[str] = None):
        super().__init__(message, details={"unit": unit})
        self.unit = unit


class PluginLoadError(AnalysisError):
    """Raised when a plugin bundle cannot be imported or is malformed."""

    def __init__(self, bundle: Path, reason: str):
        super().__init__(
            f"Could not load plugin {bundle}", details={"bundle": str(bundle), "reason": reason}
        )
        self.bundle = bundle
        self.reason = reason


class AnalysisCancelled(DefectScopeError):
    """Raised at a cancellation poll point once cancellation was requested.

    Not an AnalysisError, so detector isolation never catches it.
    """

    def __init__(self, where: str = ""):
        super().__init__("Analysis cancelled", details={"at": where} if where else None)
        self.where = where
