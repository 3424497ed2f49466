"""Tests for the detector registry and pattern catalog."""

import pytest

from conftest import make_factory

from defectscope.detectors import DetectorFactory, DetectorRegistry, PatternCatalog, RegistryBuilder
from defectscope.exceptions import ConfigurationError, DuplicateDetectorError, UnknownDetectorError
from defectscope.models import BugCode, BugPattern


class TestDetectorFactory:
    def test_name_required(self, call_log):
        with pytest.raises(ValueError):
            make_factory("", call_log)

    def test_comma_in_name_rejected(self, call_log):
        """Comma-separated selection lists could never name such a detector."""
        with pytest.raises(ValueError, match="commas"):
            make_factory("A,B", call_log)

    def test_create_binds_reporter(self, call_log, reporter):
        factory = make_factory("D1", call_log)
        detector = factory.create(reporter)
        assert detector.bug_reporter is reporter

    def test_create_returns_fresh_instances(self, call_log, reporter):
        factory = make_factory("D1", call_log)
        assert factory.create(reporter) is not factory.create(reporter)

    def test_with_plugin_keeps_existing_id(self, call_log):
        factory = make_factory("D1", call_log).with_plugin("first")
        assert factory.plugin_id == "first"
        assert factory.with_plugin("second").plugin_id == "first"


class TestRegistryBuilder:
    def test_registration_order_preserved(self, call_log):
        registry = (
            RegistryBuilder()
            .register(make_factory("Zeta", call_log))
            .register(make_factory("Alpha", call_log))
            .register(make_factory("Mid", call_log))
            .build()
        )
        assert registry.names() == ["Zeta", "Alpha", "Mid"]

    def test_duplicate_name_fails_fast(self, call_log):
        builder = RegistryBuilder().register(make_factory("D1", call_log))
        with pytest.raises(DuplicateDetectorError) as exc_info:
            builder.register(make_factory("D1", call_log))
        assert exc_info.value.name == "D1"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_add_bundle_from_namespace(self, call_log):
        class Bundle:
            PLUGIN_ID = "extra"
            DETECTORS = [make_factory("X", call_log)]
            BUG_PATTERNS = [BugPattern("X_BUG", "XB", "CORRECTNESS", "An X bug")]
            BUG_CODES = [BugCode("XB", "X bugs")]

        registry = RegistryBuilder().add_bundle(Bundle).build()
        assert registry.names() == ["X"]
        assert registry.get("X").plugin_id == "extra"
        assert registry.plugins == ("extra",)
        assert registry.catalog.short_description("X_BUG") == "An X bug"
        assert registry.catalog.code("XB").description == "X bugs"


class TestDetectorRegistry:
    def test_lookup_and_get(self, three_detector_registry):
        assert three_detector_registry.lookup("D2").name == "D2"
        assert three_detector_registry.lookup("nope") is None
        with pytest.raises(UnknownDetectorError, match="No such detector: nope"):
            three_detector_registry.get("nope")

    def test_enabled_filters_by_default_flag(self, three_detector_registry):
        assert [f.name for f in three_detector_registry.enabled()] == ["D1", "D3"]

    def test_back_mapping(self, three_detector_registry):
        for factory in three_detector_registry:
            assert three_detector_registry.name_of(factory) == factory.name

    def test_back_mapping_is_by_identity(self, three_detector_registry, call_log):
        stranger = make_factory("D1", call_log)
        assert three_detector_registry.name_of(stranger) is None

    def test_container_protocol(self, three_detector_registry):
        assert len(three_detector_registry) == 3
        assert "D3" in three_detector_registry
        assert "D4" not in three_detector_registry
        assert isinstance(three_detector_registry.factories, tuple)

    def test_constructor_rejects_duplicates(self, call_log):
        with pytest.raises(DuplicateDetectorError):
            DetectorRegistry([make_factory("D1", call_log), make_factory("D1", call_log)])


class TestPatternCatalog:
    def test_short_description_falls_back_to_type(self):
        catalog = PatternCatalog()
        assert catalog.short_description("UNKNOWN") == "UNKNOWN"

    def test_later_pattern_wins(self):
        catalog = PatternCatalog()
        catalog.register_pattern(BugPattern("T", "A", "STYLE", "first"))
        catalog.register_pattern(BugPattern("T", "A", "STYLE", "second"))
        assert catalog.short_description("T") == "second"
        assert len(catalog.patterns) == 1


def test_factory_equality_ignores_class(call_log):
    a = make_factory("D1", call_log)
    b = DetectorFactory(name="D1", detector_class=object)
    assert a == b
