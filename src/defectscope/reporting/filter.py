"""Include/exclude filtering of findings.

A filter file is TOML with one or more ``[[match]]`` tables::

    [[match]]
    class = "legacy.*"      # fnmatch glob on the unit name
    type = "NP_*"           # glob on the bug pattern type
    detector = "Nullness*"  # glob on the detector name
    priority = "low"        # high / normal / low

Every key given in a table must agree for the table to match; a finding
matches the filter when any table matches.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Optional

from ..exceptions import FilterError
from ..models import BugInstance, Priority
from .base import BugReporter, ErrorVerbosity, SourceLookup

_KEYS = {"class", "type", "detector", "priority"}


@dataclass(frozen=True)
class Match:
    class_glob: Optional[str] = None
    type_glob: Optional[str] = None
    detector_glob: Optional[str] = None
    priority: Optional[Priority] = None

    def matches(self, bug: BugInstance) -> bool:
        if self.class_glob is not None and not fnmatchcase(bug.class_name, self.class_glob):
            return False
        if self.type_glob is not None and not fnmatchcase(bug.type, self.type_glob):
            return False
        if self.detector_glob is not None and not fnmatchcase(bug.detector, self.detector_glob):
            return False
        if self.priority is not None and bug.priority is not self.priority:
            return False
        return True


class Filter:
    """Predicate over findings built from ``[[match]]`` tables."""

    def __init__(self, matches: list[Match]):
        self.matches_list = list(matches)

    def matches(self, bug: BugInstance) -> bool:
        return any(m.matches(bug) for m in self.matches_list)

    @classmethod
    def from_file(cls, path: Path) -> Filter:
        from ..config import load_toml

        path = Path(path)
        if not path.is_file():
            raise FilterError(path, "file not found")
        try:
            data = load_toml(path)
        except Exception as e:
            raise FilterError(path, str(e)) from e
        return cls.from_dict(data, path)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path = Path("<filter>")) -> Filter:
        tables = data.get("match", [])
        if not isinstance(tables, list):
            raise FilterError(path, "'match' must be an array of tables")
        return cls([_parse_match(table, path) for table in tables])


def _parse_match(table: Any, path: Path) -> Match:
    if not isinstance(table, dict):
        raise FilterError(path, "each [[match]] entry must be a table")
    unknown = set(table) - _KEYS
    if unknown:
        raise FilterError(path, f"unknown match keys: {', '.join(sorted(unknown))}")
    if not table:
        raise FilterError(path, "empty [[match]] table")

    priority = table.get("priority")
    if priority is not None:
        try:
            priority = Priority[str(priority).upper()] if isinstance(priority, str) else Priority(priority)
        except (KeyError, ValueError):
            raise FilterError(path, f"invalid priority: {priority!r}") from None

    return Match(
        class_glob=table.get("class"),
        type_glob=table.get("type"),
        detector_glob=table.get("detector"),
        priority=priority,
    )


class FilterBugReporter(BugReporter):
    """Forward a finding to ``delegate`` when ``filter.matches(bug) == include``.

    Everything other than findings goes straight to the delegate.
    """

    def __init__(self, delegate: BugReporter, bug_filter: Filter, include: bool):
        super().__init__(delegate.error_console)
        self.delegate = delegate
        self.filter = bug_filter
        self.include = include

    def accepts(self, bug: BugInstance) -> bool:
        return self.filter.matches(bug) == self.include

    def do_report_bug(self, bug: BugInstance) -> None:
        self.delegate.report_bug(bug)

    def log_error(self, message: str) -> None:
        self.delegate.log_error(message)

    @property
    def queued_errors(self) -> list[str]:
        return self.delegate.queued_errors

    def set_error_verbosity(self, level: ErrorVerbosity) -> None:
        self.delegate.set_error_verbosity(level)

    def set_source_lookup(self, lookup: SourceLookup) -> None:
        self.delegate.set_source_lookup(lookup)

    def source_file(self, class_name: str) -> Optional[str]:
        return self.delegate.source_file(class_name)

    def finish(self) -> None:
        self.delegate.finish()

    def report_queued_errors(self) -> None:
        self.delegate.report_queued_errors()
