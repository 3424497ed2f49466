"""AnalysisEngine — ingest, analyze, finalize and flush one run at a time."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..decoding import Decoder, PythonModuleDecoder
from ..detectors.registry import DetectorRegistry
from ..detectors.selection import ActiveDetectorSet, SelectionSpec, select_detectors
from ..exceptions import AnalysisCancelled, IngestionError, UnitNotFoundError
from ..logging_config import get_logger
from ..reporting.base import BugReporter
from ..reporting.filter import Filter, FilterBugReporter
from ..repository import UnitRepository
from .cancellation import CancellationToken
from .ingestion import DEFAULT_ARCHIVE_SUFFIXES, Ingester
from .pipeline import AnalysisPipeline
from .progress import NullProgress, ProgressCallback

logger = get_logger(__name__)


class RunState(Enum):
    IDLE = "idle"
    INGESTING = "ingesting"
    ANALYZING = "analyzing"
    FINALIZING = "finalizing"
    FLUSHED = "flushed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (RunState.FLUSHED, RunState.CANCELLED, RunState.FAILED)


@dataclass(frozen=True)
class RunSummary:
    """Counts for one completed run."""

    units: int
    detectors: int
    unit_errors: int
    internal_errors: int
    bugs_reported: int


class AnalysisEngine:
    """Runs the active detectors over every unit found in a list of inputs.

    The engine owns the unit repository. Detector instances are created
    afresh by every ``execute``, so nothing a detector keeps across units
    carries over into the next run.

    Example:
        >>> registry = load_registry(Path("plugin"))
        >>> engine = AnalysisEngine(registry, TextBugReporter())
        >>> summary = engine.execute(["app.whl", "tools/cli.py"])
    """

    def __init__(
        self,
        registry: DetectorRegistry,
        reporter: BugReporter,
        selection: Optional[SelectionSpec] = None,
        decoder: Optional[Decoder] = None,
        progress: Optional[ProgressCallback] = None,
        repository: Optional[UnitRepository] = None,
        archive_suffixes: Sequence[str] = DEFAULT_ARCHIVE_SUFFIXES,
    ):
        self.registry = registry
        self.reporter = reporter
        self.selection = selection or SelectionSpec.all_enabled()
        self.decoder = decoder or PythonModuleDecoder()
        self.progress: ProgressCallback = progress or NullProgress()
        self.repository = repository if repository is not None else UnitRepository()
        self.archive_suffixes = tuple(archive_suffixes)

        self._detectors: Optional[ActiveDetectorSet] = None
        self._source_files: dict[str, Optional[str]] = {}
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def detectors(self) -> Optional[ActiveDetectorSet]:
        """Detectors of the current or most recent run, None before the first."""
        return self._detectors

    def set_progress_callback(self, progress: ProgressCallback) -> None:
        self.progress = progress

    def set_filter(self, filter_path: Union[str, Path], include: bool) -> None:
        """Wrap the reporter so only findings passing ``filter_path`` get through.

        With ``include`` true only matching findings are kept, otherwise
        matching findings are dropped.

        Raises:
            FilterError: If the filter file is missing or malformed
        """
        bug_filter = Filter.from_file(Path(filter_path))
        self.reporter = FilterBugReporter(self.reporter, bug_filter, include)
        logger.debug(f"Using {'include' if include else 'exclude'} filter {filter_path}")

    def get_source_file(self, class_name: str) -> Optional[str]:
        """Source file of a unit examined in the current run, if known."""
        return self._source_files.get(class_name)

    def execute(
        self,
        paths: Sequence[Union[str, Path]],
        token: Optional[CancellationToken] = None,
    ) -> RunSummary:
        """Run every active detector over every unit in ``paths``.

        Raises:
            ConfigurationError: If the detector selection is invalid
            IngestionError: If an input cannot be read or decoded (state FAILED)
            UnitNotFoundError: If an ingested unit vanished (state FAILED)
            AnalysisCancelled: If ``token`` was cancelled (state CANCELLED)

        Any other exception escaping a stage also leaves the run FAILED.
        """
        token = token or CancellationToken()
        self._state = RunState.IDLE
        self._source_files.clear()

        detectors = select_detectors(self.registry, self.selection, self.reporter)
        self._detectors = detectors
        self.reporter.set_source_lookup(self.get_source_file)
        pipeline = AnalysisPipeline(
            self.repository,
            detectors,
            self.reporter,
            progress=self.progress,
            token=token,
            source_files=self._source_files,
        )
        bugs_before = self.reporter.bug_count

        try:
            self._state = RunState.INGESTING
            ingester = Ingester(
                self.repository,
                self.decoder,
                progress=self.progress,
                token=token,
                archive_suffixes=self.archive_suffixes,
            )
            unit_names = ingester.ingest(paths)

            self._state = RunState.ANALYZING
            pipeline.analyze(unit_names)

            self._state = RunState.FINALIZING
            pipeline.finalize()
            pipeline.flush()
            self._state = RunState.FLUSHED
        except AnalysisCancelled as e:
            logger.info(f"Run cancelled in state {self._state.value}: {e}")
            self._state = RunState.CANCELLED
            raise
        except (IngestionError, UnitNotFoundError) as e:
            logger.error(f"Run failed in state {self._state.value}: {e}")
            self._state = RunState.FAILED
            raise
        except Exception as e:
            logger.error(f"Run failed in state {self._state.value}: {type(e).__name__}: {e}")
            self._state = RunState.FAILED
            raise

        stats = pipeline.stats
        summary = RunSummary(
            units=stats.units,
            detectors=len(detectors),
            unit_errors=stats.unit_errors,
            internal_errors=stats.internal_errors,
            bugs_reported=self.reporter.bug_count - bugs_before,
        )
        logger.info(
            f"Analyzed {summary.units} units with {summary.detectors} detectors: "
            f"{summary.bugs_reported} findings, "
            f"{summary.unit_errors + summary.internal_errors} detector errors"
        )
        return summary
