"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from defectscope.exceptions import (
    AnalysisCancelled,
    AnalysisError,
    ConfigurationError,
    DecodeError,
    DefectScopeError,
    DetectorSelectionError,
    DuplicateDetectorError,
    DuplicateOmitError,
    FilterError,
    IngestionError,
    InvalidConfigError,
    PluginDirectoryError,
    PluginLoadError,
    UnitAnalysisError,
    UnitNotFoundError,
    UnknownDetectorError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            InvalidConfigError("k", "v", "bad"),
            PluginDirectoryError(Path("plugin"), "missing"),
            DuplicateDetectorError("D1"),
            UnknownDetectorError("D1"),
            DetectorSelectionError("inconsistent"),
            DuplicateOmitError("D1"),
            FilterError(Path("f.toml"), "bad"),
        ],
    )
    def test_configuration_errors(self, exc):
        assert isinstance(exc, ConfigurationError)
        assert isinstance(exc, DefectScopeError)

    @pytest.mark.parametrize(
        "exc",
        [
            DecodeError("a/Foo.py", "syntax"),
            IngestionError(Path("A.jar"), "corrupt"),
            UnitNotFoundError("a.Foo"),
            UnitAnalysisError("cannot analyze"),
            PluginLoadError(Path("bundle.py"), "broken"),
        ],
    )
    def test_analysis_errors(self, exc):
        assert isinstance(exc, AnalysisError)

    def test_cancellation_is_not_an_analysis_error(self):
        exc = AnalysisCancelled("D1 on a.Foo")
        assert isinstance(exc, DefectScopeError)
        assert not isinstance(exc, AnalysisError)


class TestMessages:
    def test_details_rendered(self):
        exc = IngestionError(Path("A.jar"), "corrupt", entry="a/Foo.py")
        assert str(exc) == "Could not analyze A.jar (path=A.jar, reason=corrupt, entry=a/Foo.py)"

    def test_no_details(self):
        assert str(DetectorSelectionError("inconsistent")) == "inconsistent"

    def test_unknown_detector_message(self):
        assert str(UnknownDetectorError("Foo")).startswith("No such detector: Foo")

    def test_cancelled_location(self):
        assert AnalysisCancelled("D1 on a.Foo").where == "D1 on a.Foo"
        assert str(AnalysisCancelled()) == "Analysis cancelled"

    def test_missing_context_is_omitted(self):
        exc = IngestionError(Path("app.zip"), "truncated")
        assert exc.details == {"path": "app.zip", "reason": "truncated"}
        assert str(DuplicateDetectorError("D1")) == "Detector already registered: D1 (detector=D1)"
