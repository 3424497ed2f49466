"""Analysis pipeline — run every active detector over every ingested unit.

Failure isolation: whatever a detector raises while visiting a unit or
reporting (other than cancellation) is logged to the bug reporter and the
pipeline moves on. Only a unit missing from the repository halts the run,
because that means ingestion and analysis disagree.
"""

from __future__ import annotations

from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..detectors.base import DetectorFactory
from ..detectors.selection import ActiveDetectorSet
from ..exceptions import AnalysisCancelled, UnitAnalysisError
from ..logging_config import get_logger
from ..reporting.base import BugReporter
from ..repository import UnitRepository
from .cancellation import CancellationToken
from .context import UnitContext
from .progress import NullProgress, ProgressCallback

logger = get_logger(__name__)


class Outcome(Enum):
    """How one detector call ended."""

    OK = "ok"
    UNIT_ERROR = "unit_error"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class CallResult:
    outcome: Outcome
    error: Optional[BaseException] = None


def guarded_call(call: Callable[[], None]) -> CallResult:
    """Run one detector operation and classify how it ended.

    AnalysisCancelled and other BaseExceptions that are not Exceptions
    (KeyboardInterrupt, SystemExit) propagate unchanged.
    """
    try:
        call()
    except AnalysisCancelled:
        raise
    except UnitAnalysisError as e:
        return CallResult(Outcome.UNIT_ERROR, e)
    except Exception as e:
        return CallResult(Outcome.INTERNAL_ERROR, e)
    return CallResult(Outcome.OK)


@dataclass
class PipelineStats:
    units: int = 0
    unit_errors: int = 0
    internal_errors: int = 0


class AnalysisPipeline:
    """Per-unit, per-detector execution followed by finalization and flush."""

    def __init__(
        self,
        repository: UnitRepository,
        detectors: ActiveDetectorSet,
        bug_reporter: BugReporter,
        progress: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
        source_files: Optional[MutableMapping[str, Optional[str]]] = None,
    ):
        self.repository = repository
        self.detectors = detectors
        self.bug_reporter = bug_reporter
        self.progress = progress or NullProgress()
        self.token = token or CancellationToken()
        self.source_files = source_files if source_files is not None else {}
        self.stats = PipelineStats()

    def run(self, unit_names: Sequence[str]) -> PipelineStats:
        """Analyze, finalize and flush. Same as calling the three steps in order."""
        self.analyze(unit_names)
        self.finalize()
        self.flush()
        return self.stats

    def analyze(self, unit_names: Sequence[str]) -> None:
        """Run every detector on every unit, in ingestion order.

        Raises:
            UnitNotFoundError: If a listed unit is not in the repository
            AnalysisCancelled: If cancellation is requested before a detector call
        """
        self.progress.start_analysis(len(unit_names))
        for name in unit_names:
            self.examine_unit(name)
        self.progress.finish_per_class_analysis()

    def examine_unit(self, name: str) -> None:
        self.token.raise_if_cancelled(name)
        logger.debug(f"Examining unit {name}")
        unit = self.repository.lookup(name)
        self.source_files[unit.name] = unit.source_file
        context = UnitContext(unit)

        for factory, detector in self.detectors:
            self.token.raise_if_cancelled(f"{factory.name} on {name}")
            logger.debug(f"  running {factory.name}")
            result = guarded_call(lambda d=detector: d.visit_unit(context))
            self._route(result, factory, unit_name=name)

        self.stats.units += 1
        self.progress.finish_class()

    def finalize(self) -> None:
        """Give every detector its report() call, in selection order."""
        self.token.raise_if_cancelled("report")
        for factory, detector in self.detectors:
            self.token.raise_if_cancelled(f"{factory.name} report")
            result = guarded_call(detector.report)
            self._route(result, factory, unit_name=None)

    def flush(self) -> None:
        """Flush findings, then queued errors. The order is part of the contract."""
        self.bug_reporter.finish()
        self.bug_reporter.report_queued_errors()

    def _route(self, result: CallResult, factory: DetectorFactory, unit_name: Optional[str]) -> None:
        if result.outcome is Outcome.OK:
            return

        where = f"{factory.name} on {unit_name}" if unit_name else f"{factory.name} report"
        if result.outcome is Outcome.UNIT_ERROR:
            self.stats.unit_errors += 1
            self.bug_reporter.log_error(f"{where}: {result.error}")
            return

        self.stats.internal_errors += 1
        error = result.error
        self.bug_reporter.log_error(f"Analysis exception: {where}: {type(error).__name__}: {error}")
        logger.debug(f"Detector {where} failed unexpectedly", exc_info=error)
