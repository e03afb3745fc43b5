"""
Subclass Augmenter.

Shapes that target a superclass must also apply to instances typed only
with one of its subclasses. Rather than baking the hierarchy into the
shapes, a class-hierarchy graph is appended to each call's working graph.
"""

from __future__ import annotations

from typing import Optional

from rdflib import Graph


def augment(data_graph: Graph, subclass_graph: Optional[Graph] = None) -> Graph:
    """
    Build the graph handed to the validation engine.
    
    Args:
        data_graph: Statements detected in the input document
        subclass_graph: Optional ``rdfs:subClassOf`` hierarchy
        
    Returns:
        ``data_graph`` itself when no hierarchy is configured, otherwise a
        new graph holding the data statements followed by the hierarchy
        statements. Neither source graph is modified.
    """
    if subclass_graph is None:
        return data_graph
    
    working = Graph()
    for triple in data_graph:
        working.add(triple)
    for triple in subclass_graph:
        working.add(triple)
    return working
