"""Tests for the engine adapter and the validation report normalizer."""

from pathlib import Path

import pytest
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import RDF, RDFS, SH

from shacl_markup.engine import RawValidationFailure, ShaclEngine, read_report
from shacl_markup.errors import ShapeLookupError
from shacl_markup.graph import parse_graph
from shacl_markup.report import (
    ReportNormalizer,
    Severity,
    StructuredFailure,
    derive_service,
    failure_key,
    map_severity,
    same_failures,
    unique_by,
)

SHAPES_DIR = Path(__file__).parent / "data" / "shapes"
BASE = "https://example.org/AbCdEf"
SCHEMA = "http://schema.org/"
EX = "http://example.org/shapes#"


@pytest.fixture
def shapes():
    return parse_graph((SHAPES_DIR / "schema.ttl").read_text(encoding="utf-8"), BASE)


def raw_failure(shape: str, path: str = SCHEMA + "name", severity=SH.Violation, messages=()):
    return RawValidationFailure(
        source_shape=URIRef(EX + shape),
        focus_node=URIRef(BASE),
        path=URIRef(path) if path else None,
        messages=tuple(Literal(m) for m in messages),
        severity=severity,
        constraint_component=SH.MinCountConstraintComponent,
    )


# ============================================================================
# Severity and Service Tests
# ============================================================================

class TestSeverity:
    """Tests for severity mapping."""
    
    def test_levels(self):
        assert Severity.ERROR.value == "error"
        assert Severity.WARNING.value == "warning"
        assert Severity.INFO.value == "info"
    
    def test_mapping(self):
        """Test the fixed severity table."""
        assert map_severity(SH.Info) is Severity.INFO
        assert map_severity(SH.Warning) is Severity.WARNING
        assert map_severity(SH.Violation) is Severity.ERROR
    
    def test_unknown_and_absent_are_errors(self):
        """Test that anything else maps to error."""
        assert map_severity(URIRef("http://example.org/Critical")) is Severity.ERROR
        assert map_severity(None) is Severity.ERROR


class TestDeriveService:
    """Tests for derive_service."""
    
    def test_fragment(self):
        assert derive_service("http://example.org/shapes#ThingShape") == "ThingShape"
    
    def test_path(self):
        assert derive_service("http://example.org/shapes/ThingShape") == "ThingShape"
    
    def test_last_separator_wins(self):
        assert derive_service("http://example.org/a#b/ThingShape") == "ThingShape"
    
    def test_no_separator(self):
        assert derive_service("ThingShape") == "ThingShape"


# ============================================================================
# StructuredFailure Tests
# ============================================================================

class TestStructuredFailure:
    """Tests for StructuredFailure."""
    
    def test_to_dict_base_fields(self):
        failure = StructuredFailure(
            service="ThingShape",
            severity=Severity.WARNING,
            property=SCHEMA + "url",
            message="Bad url",
        )
        assert failure.to_dict() == {
            "property": SCHEMA + "url",
            "message": "Bad url",
            "service": "ThingShape",
            "severity": "warning",
        }
    
    def test_annotations_are_appended(self):
        failure = StructuredFailure(
            service="ThingShape",
            severity=Severity.ERROR,
            annotations=(("description", "Needs a name"), ("url", None)),
        )
        d = failure.to_dict()
        
        assert list(d) == ["property", "message", "service", "severity", "description", "url"]
        assert failure.annotation("description") == "Needs a name"
        assert failure.annotation("url") is None
        assert failure.annotation("missing") is None


# ============================================================================
# ReportNormalizer Tests
# ============================================================================

class TestReportNormalizer:
    """Tests for ReportNormalizer."""
    
    def test_normalize(self, shapes):
        """Test deriving every base field."""
        normalizer = ReportNormalizer(shapes)
        failure = normalizer.normalize(raw_failure("ThingNameShape", messages=["Name is required"]))
        
        assert failure.to_dict() == {
            "property": SCHEMA + "name",
            "message": "Name is required",
            "service": "ThingShape",
            "severity": "error",
        }
    
    def test_messages_joined(self, shapes):
        """Test that several messages are joined with '. '."""
        normalizer = ReportNormalizer(shapes)
        failure = normalizer.normalize(raw_failure("ThingNameShape", messages=["First"]))
        assert failure.message == "First"
        
        failure = normalizer.normalize(
            RawValidationFailure(
                source_shape=URIRef(EX + "ThingNameShape"),
                messages=(Literal("First"), Literal("Second")),
            )
        )
        assert failure.message in ("First. Second", "Second. First")
    
    def test_no_message_and_no_path(self, shapes):
        """Test that absent messages and paths become None."""
        normalizer = ReportNormalizer(shapes)
        failure = normalizer.normalize(raw_failure("ThingNameShape", path=None))
        
        assert failure.message is None
        assert failure.property is None
    
    def test_severities(self, shapes):
        """Test severity normalization through the normalizer."""
        normalizer = ReportNormalizer(shapes)
        
        assert normalizer.normalize(raw_failure("ThingUrlShape", severity=SH.Warning)).severity is Severity.WARNING
        assert normalizer.normalize(raw_failure("ThingDescriptionShape", severity=SH.Info)).severity is Severity.INFO
        assert normalizer.normalize(raw_failure("ThingNameShape", severity=None)).severity is Severity.ERROR
    
    def test_without_annotations_only_base_fields(self, shapes):
        """Test that no annotation map means exactly four fields."""
        failure = ReportNormalizer(shapes).normalize(raw_failure("ThingNameShape"))
        assert set(failure.to_dict()) == {"property", "message", "service", "severity"}
    
    def test_annotations(self, shapes):
        """Test that annotations are resolved on the raising shape."""
        normalizer = ReportNormalizer(shapes, {"description": str(RDFS.comment)})
        
        named = normalizer.normalize(raw_failure("ThingNameShape"))
        assert named.to_dict()["description"] == "Every thing needs a name"
        
        url = normalizer.normalize(raw_failure("ThingUrlShape", path=SCHEMA + "url"))
        assert "description" in url.to_dict()
        assert url.to_dict()["description"] is None
    
    def test_annotation_name_clash_rejected(self, shapes):
        """Test that annotations cannot shadow base fields."""
        with pytest.raises(ValueError, match="severity"):
            ReportNormalizer(shapes, {"severity": str(RDFS.label)})
    
    def test_unknown_shape_raises(self, shapes):
        """Test that a shape declared by no container raises."""
        normalizer = ReportNormalizer(shapes)
        with pytest.raises(ShapeLookupError, match="found 0") as exc_info:
            normalizer.normalize(raw_failure("OrphanShape"))
        assert exc_info.value.candidates == []
    
    def test_node_shape_failure_raises(self, shapes):
        """Test that a failure raised by a node shape itself has no container."""
        normalizer = ReportNormalizer(shapes)
        with pytest.raises(ShapeLookupError):
            normalizer.normalize(raw_failure("ThingShape"))
    
    def test_ambiguous_container_raises(self, shapes):
        """Test that a property shape shared by two containers raises."""
        shapes.add((URIRef(EX + "OtherShape"), SH.property, URIRef(EX + "ThingNameShape")))
        normalizer = ReportNormalizer(shapes)
        
        with pytest.raises(ShapeLookupError, match="found 2") as exc_info:
            normalizer.normalize(raw_failure("ThingNameShape"))
        assert len(exc_info.value.candidates) == 2
    
    def test_empty_service_raises(self):
        """Test that a container IRI with no trailing name is rejected."""
        shapes = Graph()
        shapes.add((URIRef("http://example.org/shapes/"), SH.property, URIRef(EX + "P")))
        normalizer = ReportNormalizer(shapes)
        
        with pytest.raises(ShapeLookupError, match="no trailing name"):
            normalizer.normalize(raw_failure("P"))
    
    def test_blank_node_shape(self):
        """Test a property shape declared as a blank node."""
        shapes = Graph()
        shape = BNode()
        shapes.add((URIRef(EX + "PersonShape"), SH.property, shape))
        normalizer = ReportNormalizer(shapes)
        
        failure = normalizer.normalize(RawValidationFailure(source_shape=shape))
        assert failure.service == "PersonShape"
    
    def test_normalize_all_one_record_each(self, shapes):
        """Test that duplicates are kept and nothing is dropped."""
        normalizer = ReportNormalizer(shapes)
        raws = [raw_failure("ThingNameShape"), raw_failure("ThingNameShape")]
        
        assert len(normalizer.normalize_all(raws)) == 2
        assert normalizer.normalize_all([]) == []


# ============================================================================
# Comparison Helper Tests
# ============================================================================

class TestComparisonHelpers:
    """Tests for failure_key, same_failures and unique_by."""
    
    def test_failure_key_drops_message(self):
        key = failure_key({"severity": "error", "message": "x", "service": "S", "property": "p"})
        assert key == "property:p;service:S;severity:error"
    
    def test_failure_key_accepts_records(self):
        failure = StructuredFailure(service="S", severity=Severity.INFO, property="p", message="m")
        assert failure_key(failure) == "property:p;service:S;severity:info"
    
    def test_same_failures_ignores_order_and_message(self):
        left = [
            {"property": "a", "service": "S", "severity": "error", "message": "one"},
            {"property": "b", "service": "S", "severity": "warning", "message": "two"},
        ]
        right = [
            {"property": "b", "service": "S", "severity": "warning"},
            {"property": "a", "service": "S", "severity": "error", "message": "other"},
        ]
        assert same_failures(left, right)
    
    def test_same_failures_counts_duplicates(self):
        one = [{"property": "a", "service": "S", "severity": "error"}]
        assert not same_failures(one, one * 2)
    
    def test_unique_by(self):
        failures = [
            {"property": "a", "service": "S", "severity": "error", "message": "1"},
            {"property": "a", "service": "S", "severity": "error", "message": "2"},
            {"property": "b", "service": "S", "severity": "error", "message": "3"},
        ]
        unique = unique_by(failures, ["property", "service", "severity"])
        assert [f["message"] for f in unique] == ["1", "3"]


# ============================================================================
# Engine Tests
# ============================================================================

class TestReadReport:
    """Tests for reading report graphs."""
    
    def test_read_report(self):
        report = Graph()
        result = BNode()
        report.add((result, RDF.type, SH.ValidationResult))
        report.add((result, SH.sourceShape, URIRef(EX + "ThingNameShape")))
        report.add((result, SH.resultPath, URIRef(SCHEMA + "name")))
        report.add((result, SH.resultSeverity, SH.Violation))
        report.add((result, SH.resultMessage, Literal("Name is required")))
        report.add((result, SH.focusNode, URIRef(BASE)))
        
        failures = read_report(report)
        
        assert len(failures) == 1
        assert failures[0].source_shape == URIRef(EX + "ThingNameShape")
        assert failures[0].path == URIRef(SCHEMA + "name")
        assert failures[0].messages == (Literal("Name is required"),)
        assert failures[0].value is None
    
    def test_empty_report(self):
        assert read_report(Graph()) == []


class TestShaclEngine:
    """Tests for ShaclEngine with pyshacl."""
    
    def test_reports_missing_property(self, shapes):
        data = parse_graph(
            '<> a <http://schema.org/Thing> ; <http://schema.org/description> "d" .',
            BASE,
        )
        failures = ShaclEngine(shapes).validate(data)
        
        assert len(failures) == 1
        assert failures[0].source_shape == URIRef(EX + "ThingNameShape")
        assert failures[0].path == URIRef(SCHEMA + "name")
        assert failures[0].severity == SH.Violation
    
    def test_conforming_data(self, shapes):
        data = parse_graph(
            '<> a <http://schema.org/Thing> ; <http://schema.org/name> "n" ; '
            '<http://schema.org/description> "d" .',
            BASE,
        )
        assert ShaclEngine(shapes).validate(data) == []
    
    def test_engine_does_not_modify_graphs(self, shapes):
        data = parse_graph('<> a <http://schema.org/Thing> .', BASE)
        shapes_before, data_before = set(shapes), set(data)
        engine = ShaclEngine(shapes)
        
        engine.validate(data)
        engine.validate(data)
        
        assert set(shapes) == shapes_before
        assert set(data) == data_before
