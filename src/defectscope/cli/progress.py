"""Progress display for the analyze command."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class RichProgress:
    """ProgressCallback drawing one bar for inputs and one for units.

    Use as a context manager so the live display is always stopped, also
    when the run is cancelled or fails.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        self._inputs: Optional[TaskID] = None
        self._units: Optional[TaskID] = None

    def __enter__(self) -> RichProgress:
        self._progress.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self._progress.stop()

    def report_number_of_archives(self, num_archives: int) -> None:
        self._inputs = self._progress.add_task("Reading inputs", total=num_archives)

    def finish_archive(self) -> None:
        if self._inputs is not None:
            self._progress.advance(self._inputs)

    def start_analysis(self, num_units: int) -> None:
        self._units = self._progress.add_task("Analyzing units", total=num_units)

    def finish_class(self) -> None:
        if self._units is not None:
            self._progress.advance(self._units)

    def finish_per_class_analysis(self) -> None:
        if self._units is not None:
            self._progress.update(self._units, description="[green]Analysis done[/]")
