"""
defectscope - pluggable defect detection for Python code

Loads detector plugins, decodes every module found in the given archives,
directories and files, runs the selected detectors over each module and
sends their findings to a reporter.
"""

__version__ = "0.1.0"

from .config import EngineConfig, load_config
from .detectors import (
    Detector,
    DetectorFactory,
    DetectorRegistry,
    RegistryBuilder,
    SelectionSpec,
    load_registry,
)
from .engine import AnalysisEngine, CancellationToken, RunState, RunSummary, UnitContext
from .models import BugCode, BugInstance, BugPattern, Priority, ProgramUnit
from .reporting import BugReporter, get_reporter

__all__ = [
    "AnalysisEngine",  # Main entry point
    "CancellationToken",
    "RunState",
    "RunSummary",
    "UnitContext",
    "Detector",  # Plugin API
    "DetectorFactory",
    "DetectorRegistry",
    "RegistryBuilder",
    "SelectionSpec",
    "load_registry",
    "BugCode",
    "BugInstance",
    "BugPattern",
    "Priority",
    "ProgramUnit",
    "BugReporter",
    "get_reporter",
    "EngineConfig",
    "load_config",
]
