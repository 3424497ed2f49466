"""Plain and class-sorted text reporters."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..detectors.registry import PatternCatalog
from ..models import BugInstance, Priority
from .base import BugReporter

PRIORITY_STYLE = {
    Priority.HIGH: "bold red",
    Priority.NORMAL: "yellow",
    Priority.LOW: "dim",
}


class TextBugReporter(BugReporter):
    """Print each finding as soon as a detector reports it."""

    def __init__(
        self,
        console: Optional[Console] = None,
        catalog: Optional[PatternCatalog] = None,
        error_console: Optional[Console] = None,
    ):
        super().__init__(error_console)
        self.console = console or Console()
        self.catalog = catalog

    def do_report_bug(self, bug: BugInstance) -> None:
        self.console.print(self.format_bug(bug))

    def format_bug(self, bug: BugInstance) -> str:
        style = PRIORITY_STYLE[bug.priority]
        tag = bug.priority.name[0]
        description = self.catalog.short_description(bug.type) if self.catalog else bug.type
        text = f"[{style}]{tag}[/] [bold]{escape(bug.type)}[/]"
        if description != bug.type:
            text += f" {escape(description)}"
        if bug.message:
            text += f": {escape(bug.message)}"
        return f"{text}  [dim]at {escape(self._location(bug))}[/]"

    def _location(self, bug: BugInstance) -> str:
        source = self.source_file(bug.class_name) or "<unknown source>"
        if bug.line is not None:
            source = f"{source}:{bug.line}"
        return f"{bug.class_name} ({source})"


class SortingBugReporter(TextBugReporter):
    """Buffer findings and print them ordered by class, line and type on finish()."""

    def __init__(
        self,
        console: Optional[Console] = None,
        catalog: Optional[PatternCatalog] = None,
        error_console: Optional[Console] = None,
    ):
        super().__init__(console, catalog, error_console)
        self._pending: list[BugInstance] = []

    def do_report_bug(self, bug: BugInstance) -> None:
        self._pending.append(bug)

    def finish(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, []
        for bug in sorted(pending, key=BugInstance.sort_key):
            self.console.print(self.format_bug(bug))
