"""Bug reporter interface — the sink for findings and analysis errors."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Callable, Optional

from rich.console import Console

from ..logging_config import get_logger
from ..models import BugInstance

logger = get_logger(__name__)

SourceLookup = Callable[[str], Optional[str]]


class ErrorVerbosity(IntEnum):
    SILENT = 0
    NORMAL = 1


def _no_source(class_name: str) -> Optional[str]:
    return None


class BugReporter(ABC):
    """Receives findings and error messages for one run.

    Findings go to ``do_report_bug`` as they arrive. Error messages are
    queued (each distinct message once) and only written by
    ``report_queued_errors``, which the engine calls after ``finish``.
    Methods are safe to call from several threads.
    """

    def __init__(self, error_console: Optional[Console] = None):
        self.error_console = error_console or Console(stderr=True)
        self.verbosity = ErrorVerbosity.NORMAL
        self.bug_count = 0
        self._lock = threading.RLock()
        self._errors: list[str] = []
        self._seen_errors: set[str] = set()
        self._source_lookup: SourceLookup = _no_source

    def set_error_verbosity(self, level: ErrorVerbosity) -> None:
        self.verbosity = ErrorVerbosity(level)

    def set_source_lookup(self, lookup: SourceLookup) -> None:
        self._source_lookup = lookup

    def source_file(self, class_name: str) -> Optional[str]:
        return self._source_lookup(class_name)

    def report_bug(self, bug: BugInstance) -> None:
        with self._lock:
            if not self.accepts(bug):
                return
            self.bug_count += 1
            self.do_report_bug(bug)

    def accepts(self, bug: BugInstance) -> bool:
        """Whether ``bug`` is delivered. Rejected findings are not counted."""
        return True

    @abstractmethod
    def do_report_bug(self, bug: BugInstance) -> None:
        """Deliver one finding."""

    def log_error(self, message: str) -> None:
        with self._lock:
            logger.debug(f"Queued analysis error: {message}")
            if message in self._seen_errors:
                return
            self._seen_errors.add(message)
            self._errors.append(message)

    @property
    def queued_errors(self) -> list[str]:
        with self._lock:
            return list(self._errors)

    def finish(self) -> None:
        """Flush buffered findings. Reporters that print immediately need nothing here."""

    def report_queued_errors(self) -> None:
        with self._lock:
            if self.verbosity is ErrorVerbosity.SILENT or not self._errors:
                return
            self.emit_errors(list(self._errors))

    def emit_errors(self, errors: list[str]) -> None:
        self.error_console.print("[bold yellow]The following errors occurred during analysis:[/]")
        for message in errors:
            self.error_console.print(f"  {message}", markup=False, highlight=False)
