"""
SHACL-Markup: SHACL validation for structured-data markup.

Detects whether a document carries JSON-LD, Microdata or RDFa, builds a
graph from it, and reports SHACL failures as structured records.
"""

__version__ = "0.1.0"

from shacl_markup.errors import (
    ShaclMarkupError,
    GraphParseError,
    MarkupParseError,
    StreamError,
    FormatDetectionError,
    ShapeLookupError,
)
from shacl_markup.graph import parse_graph, copy_graph
from shacl_markup.detection import FormatDetector, MarkupFormat, AttemptResult, Detection
from shacl_markup.subclasses import augment
from shacl_markup.annotations import resolve_annotation
from shacl_markup.engine import ShaclEngine, RawValidationFailure
from shacl_markup.report import (
    ReportNormalizer,
    StructuredFailure,
    Severity,
    failure_key,
    same_failures,
    unique_by,
)
from shacl_markup.config import ValidatorConfig, ConfigValidationError, load_text
from shacl_markup.validator import ShaclValidator, ValidationOutcome, random_base_url

__all__ = [
    # Errors
    "ShaclMarkupError",
    "GraphParseError",
    "MarkupParseError",
    "StreamError",
    "FormatDetectionError",
    "ShapeLookupError",
    "ConfigValidationError",
    # Graphs and detection
    "parse_graph",
    "copy_graph",
    "FormatDetector",
    "MarkupFormat",
    "AttemptResult",
    "Detection",
    "augment",
    # Validation
    "ShaclEngine",
    "RawValidationFailure",
    "ReportNormalizer",
    "StructuredFailure",
    "Severity",
    "resolve_annotation",
    "ShaclValidator",
    "ValidationOutcome",
    "random_base_url",
    # Helpers
    "failure_key",
    "same_failures",
    "unique_by",
    "ValidatorConfig",
    "load_text",
]
