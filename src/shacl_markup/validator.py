"""
SHACL validator for structured-data markup.

Detects the markup format of a document, validates the resulting graph
against a shapes graph, and reports StructuredFailure records.

Example:
    validator = ShaclValidator(shapes_ttl, subclasses=hierarchy_ttl)
    outcome = await validator.validate(html)
    for failure in outcome.failures:
        print(failure.service, failure.property, failure.severity.value)
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from rdflib import Graph

from shacl_markup.config import (
    DEFAULT_BASE_URL_LENGTH,
    DEFAULT_BASE_URL_PREFIX,
    ValidatorConfig,
    load_text,
)
from shacl_markup.detection import FormatDetector, MarkupFormat
from shacl_markup.engine import ShaclEngine
from shacl_markup.graph import parse_graph
from shacl_markup.report import ReportNormalizer, StructuredFailure
from shacl_markup.subclasses import augment

logger = logging.getLogger(__name__)

_URL_CHARACTERS = string.ascii_letters + string.digits


def random_base_url(prefix: str = DEFAULT_BASE_URL_PREFIX, length: int = DEFAULT_BASE_URL_LENGTH) -> str:
    """Generate a random base URL: ``prefix`` followed by ``length`` letters and digits."""
    return prefix + "".join(secrets.choice(_URL_CHARACTERS) for _ in range(length))


@dataclass
class ValidationOutcome:
    """Result of validating one document."""
    
    base_url: str
    quads: Graph
    failures: List[StructuredFailure] = field(default_factory=list)
    format: Optional[MarkupFormat] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "format": self.format.value if self.format else None,
            "quadCount": len(self.quads),
            "failures": [f.to_dict() for f in self.failures],
        }


class ShaclValidator:
    """
    Validates structured-data markup against SHACL shapes.
    
    The shapes graph, the optional class hierarchy and the annotation map
    are fixed at construction. Every call to ``validate`` works on its own
    graphs, so one validator can serve concurrent calls.
    """
    
    def __init__(
        self,
        shapes: str,
        subclasses: Optional[str] = None,
        annotations: Optional[Mapping[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
        base_url_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Args:
            shapes: SHACL shapes in Turtle
            subclasses: Optional ``rdfs:subClassOf`` hierarchy in Turtle
            annotations: Output field name -> predicate IRI read from the shape
                that raised a failure
            context: JSON-LD context for documents that declare none
            base_url_factory: Produces the base URL of each call
            
        Raises:
            GraphParseError: If the shapes or hierarchy are not valid Turtle
            ValueError: If an annotation name shadows a base failure field
        """
        self.base_url_factory = base_url_factory or random_base_url
        anchor = self.base_url_factory()
        
        self.shapes = parse_graph(shapes, anchor, syntax="turtle")
        self.subclasses = parse_graph(subclasses, anchor, syntax="turtle") if subclasses else None
        self.annotations = dict(annotations or {})
        
        self.detector = FormatDetector(context=context)
        self.engine = ShaclEngine(self.shapes)
        self.normalizer = ReportNormalizer(self.shapes, self.annotations)
        
        logger.info(
            f"Validator ready: {len(self.shapes)} shape statements, "
            f"{len(self.subclasses) if self.subclasses is not None else 0} hierarchy statements, "
            f"{len(self.annotations)} annotations"
        )
    
    @classmethod
    def from_config(cls, config: ValidatorConfig) -> "ShaclValidator":
        """Build a validator from a ValidatorConfig, reading its files."""
        config.validate()
        subclasses = load_text(config.subclasses_path) if config.subclasses_path else None
        prefix, length = config.base_url_prefix, config.base_url_length
        return cls(
            load_text(config.shapes_path),
            subclasses=subclasses,
            annotations=config.annotations,
            context=config.context,
            base_url_factory=lambda: random_base_url(prefix, length),
        )
    
    async def validate(self, text: str) -> ValidationOutcome:
        """
        Validate a document.
        
        Args:
            text: JSON-LD, or HTML with Microdata or RDFa
            
        Returns:
            ValidationOutcome with the generated base URL, the detected
            graph and the structured failures
            
        Raises:
            FormatDetectionError: If no accepted format yields a statement
            ShapeLookupError: If a failing shape has no unique container shape
        """
        base_url = self.base_url_factory()
        detection = await self.detector.detect(text, base_url)
        
        working = augment(detection.graph, self.subclasses)
        loop = asyncio.get_running_loop()
        raw_failures = await loop.run_in_executor(None, self.engine.validate, working)
        failures = self.normalizer.normalize_all(raw_failures)
        
        logger.debug(f"{base_url}: {len(failures)} failures")
        return ValidationOutcome(
            base_url=base_url,
            quads=detection.graph,
            failures=failures,
            format=detection.format,
        )
