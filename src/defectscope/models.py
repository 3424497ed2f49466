"""Core data models: program units, findings and pattern metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Optional


class Priority(IntEnum):
    """Finding priority. Lower value means more important."""

    HIGH = 1
    NORMAL = 2
    LOW = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class UnitOrigin:
    """Where a unit was read from: the input path and, for archives, the entry."""

    path: Path
    entry: Optional[str] = None

    def __str__(self) -> str:
        if self.entry is None:
            return str(self.path)
        return f"{self.path}!{self.entry}"


@dataclass(frozen=True)
class ProgramUnit:
    """One decoded program unit.

    ``name`` is the fully-qualified module name and the repository key.
    ``body`` is whatever the decoder produced; detectors know its shape.
    """

    name: str
    source_file: Optional[str]
    body: Any = field(repr=False, compare=False)
    origin: Optional[UnitOrigin] = field(default=None, compare=False)

    @property
    def package(self) -> str:
        head, _, _ = self.name.rpartition(".")
        return head


@dataclass(frozen=True)
class BugInstance:
    """A single finding emitted by a detector."""

    type: str
    priority: Priority
    detector: str
    class_name: str
    message: str = ""
    line: Optional[int] = None
    annotations: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def sort_key(self) -> tuple:
        return (self.class_name, self.line if self.line is not None else -1, self.type)

    def to_dict(self, source_file: Optional[str] = None) -> dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority.label,
            "detector": self.detector,
            "class": self.class_name,
            "source_file": source_file,
            "line": self.line,
            "message": self.message,
            "annotations": dict(self.annotations),
        }


@dataclass(frozen=True)
class BugCode:
    """Abbreviation shared by a family of bug patterns."""

    abbrev: str
    description: str


@dataclass(frozen=True)
class BugPattern:
    """Metadata describing one kind of finding a detector may report."""

    type: str
    abbrev: str
    category: str
    short_description: str = ""
    details: str = ""
