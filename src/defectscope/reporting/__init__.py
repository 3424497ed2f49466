"""Bug reporters for defectscope."""

from typing import Optional

from rich.console import Console

from ..detectors.registry import PatternCatalog
from .base import BugReporter, ErrorVerbosity
from .filter import Filter, FilterBugReporter, Match
from .json_reporter import JsonBugReporter
from .text import SortingBugReporter, TextBugReporter

REPORTERS = ("text", "sorted", "json")


def get_reporter(
    name: str,
    console: Optional[Console] = None,
    catalog: Optional[PatternCatalog] = None,
) -> BugReporter:
    """Get a reporter instance by name.

    Args:
        name: One of "text", "sorted", "json"
        console: Console for text reporters (default: stdout)
        catalog: Pattern catalog used to describe bug types

    Raises:
        ValueError: If name is not recognized
    """
    if name == "text":
        return TextBugReporter(console=console, catalog=catalog)
    if name == "sorted":
        return SortingBugReporter(console=console, catalog=catalog)
    if name == "json":
        return JsonBugReporter()
    raise ValueError(f"Unknown reporter: {name!r}. Choose from: {', '.join(REPORTERS)}")


__all__ = [
    "BugReporter",
    "ErrorVerbosity",
    "Filter",
    "FilterBugReporter",
    "Match",
    "JsonBugReporter",
    "SortingBugReporter",
    "TextBugReporter",
    "REPORTERS",
    "get_reporter",
]
