"""Base class for detector plugins and the factory that builds them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..engine.context import UnitContext
    from ..reporting.base import BugReporter


class Detector(ABC):
    """One analysis pass.

    A detector is bound to the run's bug reporter when it is created, sees
    every unit once through ``visit_unit`` and gets a final ``report`` call
    after the last unit.
    """

    def __init__(self, bug_reporter: BugReporter):
        self.bug_reporter = bug_reporter

    @abstractmethod
    def visit_unit(self, context: UnitContext) -> None:
        """Examine one unit. Raise UnitAnalysisError if it cannot be analyzed."""

    def report(self) -> None:
        """Report anything accumulated across units. Default: nothing."""


@dataclass(frozen=True)
class DetectorFactory:
    """Named, enable-by-default descriptor that builds detector instances."""

    name: str
    detector_class: Callable[[BugReporter], Detector] = field(compare=False)
    enabled_by_default: bool = True
    description: str = ""
    reports: tuple[str, ...] = ()
    plugin_id: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("detector name must be non-empty")
        if "," in self.name:
            raise ValueError(f"detector name may not contain commas: {self.name!r}")

    def create(self, bug_reporter: BugReporter) -> Detector:
        return self.detector_class(bug_reporter)

    def with_plugin(self, plugin_id: str) -> DetectorFactory:
        if self.plugin_id:
            return self
        return DetectorFactory(
            name=self.name,
            detector_class=self.detector_class,
            enabled_by_default=self.enabled_by_default,
            description=self.description,
            reports=self.reports,
            plugin_id=plugin_id,
        )
