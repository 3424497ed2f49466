"""Shared test fixtures for defectscope."""

import textwrap
import zipfile
from pathlib import Path

import pytest

from defectscope.detectors import Detector, DetectorFactory, RegistryBuilder
from defectscope.exceptions import UnitAnalysisError
from defectscope.models import BugInstance, Priority
from defectscope.reporting.base import BugReporter


class RecordingReporter(BugReporter):
    """Reporter that keeps findings in memory and records the flush order."""

    def __init__(self):
        super().__init__()
        self.bugs = []
        self.events = []
        self.emitted = []

    def do_report_bug(self, bug):
        self.bugs.append(bug)

    def finish(self):
        self.events.append("finish")

    def report_queued_errors(self):
        self.events.append("report_queued_errors")
        super().report_queued_errors()

    def emit_errors(self, errors):
        self.emitted.extend(errors)


class CallLog:
    """Shared, ordered record of detector calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, *entry):
        self.calls.append(entry)

    def visits(self):
        return [c[1:] for c in self.calls if c[0] == "visit"]

    def reports(self):
        return [c[1] for c in self.calls if c[0] == "report"]


def make_factory(name, log, enabled=True, behaviour=None, on_report=None):
    """Build a DetectorFactory whose detectors record every call in ``log``.

    ``behaviour(detector, context)`` runs inside visit_unit after recording.
    ``on_report(detector)`` runs inside report after recording.
    """

    class ScriptedDetector(Detector):
        def visit_unit(self, context):
            log("visit", name, context.name)
            if behaviour is not None:
                behaviour(self, context)

        def report(self):
            log("report", name)
            if on_report is not None:
                on_report(self)

    ScriptedDetector.__name__ = f"{name}Detector"
    return DetectorFactory(name=name, detector_class=ScriptedDetector, enabled_by_default=enabled)


def raise_unit_error(detector, context):
    raise UnitAnalysisError(f"cannot analyze {context.name}", unit=context.name)


def raise_runtime_error(detector, context):
    raise RuntimeError("boom")


def report_one_bug(detector, context):
    detector.bug_reporter.report_bug(
        BugInstance(
            type="TEST_PATTERN",
            priority=Priority.NORMAL,
            detector="D1",
            class_name=context.name,
            line=1,
        )
    )


def write_zip(path: Path, entries: dict) -> Path:
    """Write a zip archive with ``entries`` (name -> source text) in insertion order."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, source in entries.items():
            archive.writestr(name, textwrap.dedent(source))
    return path


def write_source(path: Path, source: str = "x = 1\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


@pytest.fixture
def call_log():
    return CallLog()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def three_detector_registry(call_log):
    """D1 enabled, D2 disabled, D3 enabled, registered in that order."""
    return (
        RegistryBuilder()
        .register(make_factory("D1", call_log))
        .register(make_factory("D2", call_log, enabled=False))
        .register(make_factory("D3", call_log))
        .build()
    )


@pytest.fixture
def sample_inputs(tmp_path):
    """A.jar with a/Foo.py and a/Bar.py, plus the standalone package file b/Baz.py."""
    jar = write_zip(
        tmp_path / "A.jar",
        {
            "a/Foo.py": "class Foo:\n    pass\n",
            "a/Bar.py": "class Bar:\n    pass\n",
        },
    )
    write_source(tmp_path / "b" / "__init__.py", "")
    baz = write_source(tmp_path / "b" / "Baz.py", "class Baz:\n    pass\n")
    return [jar, baz]


PLUGIN_SOURCE = '''
from defectscope import BugPattern, Detector, DetectorFactory, BugInstance, Priority


class PrintCallDetector(Detector):
    """Flags calls to print()."""

    def visit_unit(self, context):
        import ast

        for node in ast.walk(context.body):
            if isinstance(node, ast.Call) and getattr(node.func, "id", None) == "print":
                self.bug_reporter.report_bug(
                    BugInstance(
                        type="PRINT_CALL",
                        priority=Priority.LOW,
                        detector="PrintCall",
                        class_name=context.name,
                        line=node.lineno,
                    )
                )


class QuietDetector(Detector):
    def visit_unit(self, context):
        pass


PLUGIN_ID = "core"
DETECTORS = [
    DetectorFactory("PrintCall", PrintCallDetector, reports=("PRINT_CALL",)),
    DetectorFactory("Quiet", QuietDetector, enabled_by_default=False),
]
BUG_PATTERNS = [BugPattern("PRINT_CALL", "PC", "STYLE", "Call to print()")]
'''


@pytest.fixture
def plugin_dir(tmp_path):
    """Plugin directory holding one working bundle."""
    directory = tmp_path / "plugin"
    directory.mkdir()
    (directory / "core.py").write_text(PLUGIN_SOURCE, encoding="utf-8")
    return directory
