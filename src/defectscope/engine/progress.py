"""Progress callbacks — notified at the milestones of a run."""

from typing import Protocol


class ProgressCallback(Protocol):
    """Receives run milestones. Every method may be a no-op."""

    def report_number_of_archives(self, num_archives: int) -> None: ...

    def finish_archive(self) -> None: ...

    def start_analysis(self, num_units: int) -> None: ...

    def finish_class(self) -> None: ...

    def finish_per_class_analysis(self) -> None: ...


class NullProgress:
    """No-op progress for library use, tests and --no-progress."""

    def report_number_of_archives(self, num_archives: int) -> None:
        pass

    def finish_archive(self) -> None:
        pass

    def start_analysis(self, num_units: int) -> None:
        pass

    def finish_class(self) -> None:
        pass

    def finish_per_class_analysis(self) -> None:
        pass
