"""Analysis engine: ingestion, the detector pipeline and the run state machine."""

from .cancellation import CancellationToken
from .context import UnitContext
from .engine import AnalysisEngine, RunState, RunSummary
from .ingestion import DEFAULT_ARCHIVE_SUFFIXES, Ingester
from .pipeline import AnalysisPipeline, CallResult, Outcome, PipelineStats, guarded_call
from .progress import NullProgress, ProgressCallback

__all__ = [
    "AnalysisEngine",
    "RunState",
    "RunSummary",
    "AnalysisPipeline",
    "CallResult",
    "Outcome",
    "PipelineStats",
    "guarded_call",
    "CancellationToken",
    "UnitContext",
    "Ingester",
    "DEFAULT_ARCHIVE_SUFFIXES",
    "NullProgress",
    "ProgressCallback",
]
