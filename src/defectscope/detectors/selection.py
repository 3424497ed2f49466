"""Detector selection — which registered detectors run on this invocation.

Three modes:

* ALL_ENABLED: every factory enabled by default, in registration order.
* INCLUDE: exactly the named factories, in the order they were named.
* EXCLUDE: every factory except the named ones, in registration order.

Selection never silently runs fewer detectors than requested: an unknown
name, a duplicated omit entry or a size mismatch is a ConfigurationError.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ..exceptions import DetectorSelectionError, DuplicateOmitError, UnknownDetectorError
from ..logging_config import get_logger
from .base import Detector, DetectorFactory
from .registry import DetectorRegistry

if TYPE_CHECKING:
    from ..reporting.base import BugReporter

logger = get_logger(__name__)


class SelectionMode(Enum):
    ALL_ENABLED = "all_enabled"
    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class SelectionSpec:
    """How to derive the active detector set for one run."""

    mode: SelectionMode = SelectionMode.ALL_ENABLED
    names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.mode is SelectionMode.ALL_ENABLED and self.names:
            raise DetectorSelectionError("A detector list requires include or exclude mode")

    @classmethod
    def all_enabled(cls) -> SelectionSpec:
        return cls()

    @classmethod
    def include(cls, names: Iterable[str]) -> SelectionSpec:
        return cls(SelectionMode.INCLUDE, tuple(names))

    @classmethod
    def exclude(cls, names: Iterable[str]) -> SelectionSpec:
        return cls(SelectionMode.EXCLUDE, tuple(names))

    @classmethod
    def from_options(
        cls,
        include: Optional[Sequence[str]] = None,
        omit: Optional[Sequence[str]] = None,
    ) -> SelectionSpec:
        """Build a spec from the two mutually exclusive run options."""
        if include is not None and omit is not None:
            raise DetectorSelectionError(
                "Detector inclusion and exclusion lists are mutually exclusive"
            )
        if include is not None:
            return cls.include(include)
        if omit is not None:
            return cls.exclude(omit)
        return cls.all_enabled()


def parse_detector_list(value: str) -> list[str]:
    """Split a comma-separated detector list, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class ActiveDetectorSet(Sequence):
    """Ordered detectors for one run, each paired with the factory that built it."""

    def __init__(self, entries: Iterable[tuple[DetectorFactory, Detector]] = ()):
        self._entries: tuple[tuple[DetectorFactory, Detector], ...] = tuple(entries)

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[DetectorFactory, Detector]]:
        return iter(self._entries)

    @property
    def names(self) -> list[str]:
        return [factory.name for factory, _ in self._entries]

    @property
    def detectors(self) -> list[Detector]:
        return [detector for _, detector in self._entries]

    def __repr__(self) -> str:
        return f"ActiveDetectorSet({self.names})"


def select_detectors(
    registry: DetectorRegistry,
    spec: SelectionSpec,
    bug_reporter: BugReporter,
) -> ActiveDetectorSet:
    """Instantiate the detectors ``spec`` selects, bound to ``bug_reporter``.

    Raises:
        UnknownDetectorError: If a listed name is not registered
        DuplicateOmitError: If the omit list names a detector twice
        DetectorSelectionError: If the omit list does not account for the
            resulting detector count
    """
    if spec.mode is SelectionMode.ALL_ENABLED:
        chosen = registry.enabled()
    elif spec.mode is SelectionMode.INCLUDE:
        chosen = [registry.get(name) for name in spec.names]
    else:
        chosen = _exclude(registry, spec.names)

    active = ActiveDetectorSet((factory, factory.create(bug_reporter)) for factory in chosen)
    logger.debug(f"Selected {len(active)} detectors ({spec.mode.value}): {', '.join(active.names)}")
    return active


def _exclude(registry: DetectorRegistry, omit: Sequence[str]) -> list[DetectorFactory]:
    duplicates = [name for name, count in Counter(omit).items() if count > 1]
    if duplicates:
        raise DuplicateOmitError(duplicates[0])
    for name in omit:
        if name not in registry:
            raise UnknownDetectorError(name)

    omitted = set(omit)
    chosen = [f for f in registry if registry.name_of(f) not in omitted]

    expected = len(registry) - len(omit)
    if len(chosen) != expected:
        raise DetectorSelectionError(
            "Bad omit list - nonexistent or duplicate detector specified?",
            details={"expected": str(expected), "selected": str(len(chosen))},
        )
    return chosen
