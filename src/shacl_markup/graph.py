"""
Graph Builder.

Parses statement text (Turtle, N-Triples, JSON-LD) into an in-memory
rdflib graph that can be queried by pattern. Every statement lands in the
default graph.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Tuple

from rdflib import Graph
from rdflib.term import Node

from shacl_markup.errors import GraphParseError

logger = logging.getLogger(__name__)

SUPPORTED_SYNTAXES = ("turtle", "nt", "json-ld")


def parse_graph(text: str, base_iri: str, syntax: str = "turtle") -> Graph:
    """
    Parse statement text into a fresh graph.
    
    Args:
        text: Statement text in the declared syntax
        base_iri: Anchor IRI used to resolve relative references
        syntax: One of ``turtle``, ``nt`` or ``json-ld``
        
    Returns:
        A new rdflib Graph holding the parsed statements
        
    Raises:
        ValueError: If the syntax is not supported
        GraphParseError: If the text is not valid in the declared syntax
    """
    if syntax not in SUPPORTED_SYNTAXES:
        raise ValueError(
            f"Unsupported syntax: {syntax}. Use one of: {', '.join(SUPPORTED_SYNTAXES)}"
        )
    
    graph = Graph()
    try:
        graph.parse(data=text, format=syntax, publicID=base_iri)
    except Exception as e:
        raise GraphParseError(f"Error parsing {syntax} data: {e}") from e
    
    logger.debug(f"Parsed {len(graph)} statements from {syntax} data")
    return graph


def match(
    graph: Graph,
    subject: Optional[Node] = None,
    predicate: Optional[Node] = None,
    obj: Optional[Node] = None,
) -> Iterator[Tuple[Node, Node, Node]]:
    """Yield statements matching a pattern; ``None`` matches anything."""
    return graph.triples((subject, predicate, obj))


def graph_to_records(graph: Graph) -> list[dict[str, str]]:
    """Convert a graph to a list of subject/predicate/object dicts for JSON output."""
    return [
        {"subject": str(s), "predicate": str(p), "object": str(o)}
        for s, p, o in graph
    ]


def copy_graph(graph: Graph) -> Graph:
    """Return a new graph holding the same statements and prefix bindings."""
    copy = Graph()
    for prefix, namespace in graph.namespaces():
        copy.bind(prefix, namespace, override=True, replace=True)
    for triple in graph:
        copy.add(triple)
    return copy
