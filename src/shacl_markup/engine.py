"""
Validation engine adapter.

Runs pyshacl over a data graph and reads the ``sh:ValidationResult`` nodes
of its report graph into RawValidationFailure records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pyshacl import validate as shacl_validate
from rdflib import Graph, Literal
from rdflib.namespace import RDF, SH
from rdflib.term import Node

from shacl_markup.graph import copy_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawValidationFailure:
    """A validation result as the engine reports it."""
    
    source_shape: Node
    focus_node: Optional[Node] = None
    path: Optional[Node] = None
    messages: Tuple[Literal, ...] = ()
    severity: Optional[Node] = None
    constraint_component: Optional[Node] = None
    value: Optional[Node] = None


def read_report(report_graph: Graph) -> List[RawValidationFailure]:
    """Extract every validation result from a SHACL report graph."""
    failures = []
    for result in report_graph.subjects(RDF.type, SH.ValidationResult):
        failures.append(RawValidationFailure(
            source_shape=report_graph.value(result, SH.sourceShape),
            focus_node=report_graph.value(result, SH.focusNode),
            path=report_graph.value(result, SH.resultPath),
            messages=tuple(report_graph.objects(result, SH.resultMessage)),
            severity=report_graph.value(result, SH.resultSeverity),
            constraint_component=report_graph.value(result, SH.sourceConstraintComponent),
            value=report_graph.value(result, SH.value),
        ))
    return failures


class ShaclEngine:
    """
    SHACL validation against a fixed shapes graph.
    
    The shapes graph is loaded once and never handed to pyshacl directly:
    pyshacl may add statements to the shapes graph it is given, so each call
    validates against its own copy and gets its own report graph.
    """
    
    def __init__(self, shapes_graph: Graph):
        self.shapes_graph = shapes_graph
    
    def validate(self, data_graph: Graph) -> List[RawValidationFailure]:
        """
        Validate a data graph.
        
        Args:
            data_graph: Statements to validate, hierarchy included
            
        Returns:
            The raw failures in report order
        """
        conforms, report_graph, _ = shacl_validate(
            data_graph,
            shacl_graph=copy_graph(self.shapes_graph),
            inference="none",
            abort_on_first=False,
            meta_shacl=False,
            advanced=False,
            debug=False,
        )
        failures = read_report(report_graph)
        logger.debug(f"Engine reported {len(failures)} results (conforms={conforms})")
        return failures
