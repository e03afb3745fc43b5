"""
Validation Report Normalizer.

Turns engine-specific validation results into StructuredFailure records:
- ``service``: trailing segment of the shape that declares the failing
  property shape
- ``severity``: one of error, warning, info
- ``message``: the result messages joined into one string
- ``property``: the result path
- optional annotation fields read from the shapes graph
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from rdflib import Graph, URIRef
from rdflib.namespace import SH
from rdflib.term import Node

from shacl_markup.annotations import resolve_annotation
from shacl_markup.engine import RawValidationFailure
from shacl_markup.errors import ShapeLookupError
from shacl_markup.graph import match

BASE_FIELDS = ("property", "message", "service", "severity")

_SERVICE_PREFIX = re.compile(r".*[\\/#]")


class Severity(Enum):
    """Normalized failure severity."""
    
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_SEVERITY_BY_IRI = {
    SH.Info: Severity.INFO,
    SH.Warning: Severity.WARNING,
}


def map_severity(severity: Optional[Node]) -> Severity:
    """Map a SHACL severity IRI; anything but sh:Info or sh:Warning is an error."""
    return _SEVERITY_BY_IRI.get(severity, Severity.ERROR)


def derive_service(shape_iri: str) -> str:
    """Return the part of a shape IRI after its last ``/``, ``#`` or ``\\``."""
    return _SERVICE_PREFIX.sub("", shape_iri)


@dataclass(frozen=True)
class StructuredFailure:
    """A normalized validation failure."""
    
    service: str
    severity: Severity
    property: Optional[str] = None
    message: Optional[str] = None
    annotations: Tuple[Tuple[str, Optional[str]], ...] = field(default_factory=tuple)
    
    def annotation(self, name: str) -> Optional[str]:
        """Value of an annotation field, or None."""
        for key, value in self.annotations:
            if key == name:
                return value
        return None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to the flat JSON representation."""
        d: Dict[str, Any] = {
            "property": self.property,
            "message": self.message,
            "service": self.service,
            "severity": self.severity.value,
        }
        for key, value in self.annotations:
            d[key] = value
        return d


class ReportNormalizer:
    """
    Converts raw engine failures into StructuredFailure records.
    
    Each failure is handled on its own; there is no state shared between
    failures, and the output has exactly one record per input failure.
    """
    
    def __init__(self, shapes_graph: Graph, annotations: Optional[Mapping[str, str]] = None):
        """
        Args:
            shapes_graph: The shapes graph the failures were raised against
            annotations: Output field name -> annotation predicate IRI
            
        Raises:
            ValueError: If an annotation name shadows a base field
        """
        annotations = dict(annotations or {})
        clashes = sorted(set(annotations) & set(BASE_FIELDS))
        if clashes:
            raise ValueError(f"Annotation names clash with base fields: {', '.join(clashes)}")
        
        self.shapes_graph = shapes_graph
        self.annotations: Tuple[Tuple[str, URIRef], ...] = tuple(
            (name, URIRef(predicate)) for name, predicate in annotations.items()
        )
    
    def container_shape(self, shape: Node) -> Node:
        """
        Find the shape that declares ``shape`` through ``sh:property``.
        
        Raises:
            ShapeLookupError: Unless exactly one such shape exists
        """
        candidates = [s for s, _, _ in match(self.shapes_graph, None, SH.property, shape)]
        if len(candidates) != 1:
            raise ShapeLookupError(
                f"Expected exactly one shape declaring {shape} via sh:property, "
                f"found {len(candidates)}",
                shape=shape,
                candidates=candidates,
            )
        return candidates[0]
    
    def normalize(self, failure: RawValidationFailure) -> StructuredFailure:
        """Convert a single raw failure."""
        container = self.container_shape(failure.source_shape)
        service = derive_service(str(container))
        if not service:
            raise ShapeLookupError(
                f"Shape {container} has no trailing name to use as service",
                shape=failure.source_shape,
                candidates=[container],
            )
        
        message = None
        if failure.messages:
            message = ". ".join(str(m) for m in failure.messages)
        
        annotations = tuple(
            (name, resolve_annotation(self.shapes_graph, failure.source_shape, predicate))
            for name, predicate in self.annotations
        )
        
        return StructuredFailure(
            property=str(failure.path) if failure.path is not None else None,
            message=message,
            service=service,
            severity=map_severity(failure.severity),
            annotations=annotations,
        )
    
    def normalize_all(self, failures: Iterable[RawValidationFailure]) -> List[StructuredFailure]:
        """Convert a list of raw failures, one record each."""
        return [self.normalize(f) for f in failures]


# =============================================================================
# Comparison helpers
# =============================================================================

def _as_dict(failure: Any) -> Dict[str, Any]:
    return failure.to_dict() if isinstance(failure, StructuredFailure) else dict(failure)


def failure_key(failure: Any) -> str:
    """
    Stringify a failure for order-insensitive comparison.
    
    ``message`` and fields without a value are dropped; the rest are
    rendered as ``key:value`` pairs sorted by key and joined with ``;``.
    """
    d = _as_dict(failure)
    d.pop("message", None)
    return ";".join(f"{key}:{d[key]}" for key in sorted(d) if d[key] is not None)


def same_failures(left: Iterable[Any], right: Iterable[Any]) -> bool:
    """True if two failure lists are equal ignoring order and messages."""
    return sorted(failure_key(f) for f in left) == sorted(failure_key(f) for f in right)


def unique_by(items: Iterable[Any], keys: Sequence[str]) -> List[Any]:
    """
    Drop failures that repeat the values of ``keys``.
    
    The first failure of each group is kept and order is preserved.
    """
    seen = set()
    unique = []
    for item in items:
        d = _as_dict(item)
        marker = "".join(str(d.get(key)) for key in keys)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(item)
    return unique
