"""
Format Detector.

Guesses which serialization a document uses by trying each accepted format
in a fixed priority order and keeping the first one that yields a
non-empty graph. A document that parses under two formats is always
resolved by rank, never by which parse looks better.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from rdflib import Graph

from shacl_markup.errors import FormatDetectionError, ShaclMarkupError
from shacl_markup.formats import parse_jsonld, parse_microdata, parse_rdfa

logger = logging.getLogger(__name__)


class MarkupFormat(Enum):
    """Accepted input formats, in detection priority order."""
    
    JSON_LD = "json-ld"
    MICRODATA = "microdata"
    RDFA = "rdfa"


@dataclass
class AttemptResult:
    """Outcome of converting a document under one format."""
    
    format: MarkupFormat
    graph: Optional[Graph] = None
    reason: Optional[str] = None
    
    @property
    def succeeded(self) -> bool:
        return self.graph is not None and len(self.graph) > 0
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format.value,
            "succeeded": self.succeeded,
            "statements": len(self.graph) if self.graph is not None else 0,
            "reason": self.reason,
        }


@dataclass
class Detection:
    """A successfully detected document."""
    
    format: MarkupFormat
    graph: Graph
    attempts: List[AttemptResult] = field(default_factory=list)


Converter = Callable[[str, str], Awaitable[Graph]]


class FormatDetector:
    """
    Converts documents of unknown format into graphs.
    
    Attempts run one at a time, in the order of ``MarkupFormat``, and the
    cascade stops at the first attempt that yields at least one statement.
    
    Example:
        detector = FormatDetector()
        detection = await detector.detect(text, "https://example.org/doc")
        detection.format  # MarkupFormat.MICRODATA
    """
    
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        """
        Args:
            context: JSON-LD context applied to documents that declare none
        """
        self.context = dict(context or {})
        self._converters: Dict[MarkupFormat, Converter] = {
            MarkupFormat.JSON_LD: self._parse_jsonld,
            MarkupFormat.MICRODATA: parse_microdata,
            MarkupFormat.RDFA: parse_rdfa,
        }
    
    async def _parse_jsonld(self, text: str, base_iri: str) -> Graph:
        return await parse_jsonld(text, base_iri, self.context)
    
    async def attempt(self, markup_format: MarkupFormat, text: str, base_iri: str) -> AttemptResult:
        """Convert ``text`` under a single format, capturing any failure."""
        converter = self._converters[markup_format]
        try:
            graph = await converter(text, base_iri)
        except ShaclMarkupError as e:
            logger.debug(f"{markup_format.value} attempt failed: {e}")
            return AttemptResult(format=markup_format, reason=str(e))
        
        if len(graph) == 0:
            logger.debug(f"{markup_format.value} attempt produced no statements")
            return AttemptResult(format=markup_format, graph=graph, reason="no statements found")
        
        return AttemptResult(format=markup_format, graph=graph)
    
    async def detect(self, text: str, base_iri: str) -> Detection:
        """
        Convert a document into a non-empty graph.
        
        Args:
            text: Raw document text
            base_iri: Base identifier for the document
            
        Returns:
            Detection with the winning format, its graph, and every attempt made
            
        Raises:
            FormatDetectionError: If no format yields a statement
        """
        attempts: List[AttemptResult] = []
        for markup_format in MarkupFormat:
            result = await self.attempt(markup_format, text, base_iri)
            attempts.append(result)
            if result.succeeded:
                logger.info(f"Detected {markup_format.value} input with {len(result.graph)} statements")
                return Detection(format=markup_format, graph=result.graph, attempts=attempts)
        
        accepted = ", ".join(f.value for f in MarkupFormat)
        logger.warning(f"Format detection failed for {base_iri}")
        raise FormatDetectionError(
            "Error while parsing the data. This could be caused by incorrect data "
            f"or incorrect data format. Possible formats: {accepted}",
            attempts=attempts,
        )
