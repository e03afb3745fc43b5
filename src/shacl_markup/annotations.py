"""Annotation Resolver: metadata lookups on the shapes graph."""

from __future__ import annotations

from typing import Optional, Union

from rdflib import Graph, URIRef
from rdflib.term import Node

from shacl_markup.graph import match


def resolve_annotation(
    shapes_graph: Graph,
    node: Node,
    predicate: Union[URIRef, str],
) -> Optional[str]:
    """
    Return the value of ``predicate`` on a shape node.
    
    A shape node normally carries one value per annotation. When it carries
    several, the lexicographically smallest is returned rather than the
    first match: rdflib stores do not keep parse order, so "first" would
    vary between runs.
    
    Args:
        shapes_graph: The shapes graph
        node: Shape node that raised a failure
        predicate: Annotation predicate IRI
        
    Returns:
        The annotation value, or None if the node has none
    """
    values = [str(o) for _, _, o in match(shapes_graph, node, URIRef(str(predicate)))]
    return min(values) if values else None
