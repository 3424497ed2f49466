"""Machine-readable JSON reporter."""

from __future__ import annotations

import json
import sys
from typing import Optional, TextIO

from ..models import BugInstance
from .base import BugReporter


class JsonBugReporter(BugReporter):
    """Buffer findings; write them as one JSON document on finish().

    Queued errors are written as a second document to ``error_stream`` so
    the findings document on ``stream`` stays parseable on its own.
    """

    def __init__(self, stream: Optional[TextIO] = None, error_stream: Optional[TextIO] = None):
        super().__init__()
        self.stream = stream or sys.stdout
        self.error_stream = error_stream or sys.stderr
        self._pending: list[BugInstance] = []

    def do_report_bug(self, bug: BugInstance) -> None:
        self._pending.append(bug)

    def finish(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, []
        data = {
            "findings": [bug.to_dict(self.source_file(bug.class_name)) for bug in pending],
            "count": len(pending),
        }
        print(json.dumps(data, indent=2), file=self.stream)

    def emit_errors(self, errors: list[str]) -> None:
        print(json.dumps({"errors": errors}, indent=2), file=self.error_stream)
