"""
JSON-LD input.

An object document is treated as a single JSON-LD node whose identifier is
the base URL, so that shapes targeting the root node have a stable subject.
An array document is a list of top-level nodes; each keeps its own
identifier.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from rdflib import Graph

from shacl_markup.errors import GraphParseError, MarkupParseError
from shacl_markup.graph import parse_graph

JSONLDDocument = Union[Dict[str, Any], List[Any]]


def prepare_document(
    text: str,
    base_iri: str,
    context: Optional[Dict[str, Any]] = None,
) -> JSONLDDocument:
    """
    Load a JSON document and inject the root identifier.
    
    Args:
        text: Raw JSON text
        base_iri: Identifier given to the root node
        context: Context applied to nodes that declare none
        
    Returns:
        The JSON-LD document. An object gets ``@id`` set to ``base_iri``;
        the nodes of an array are left with their own identifiers.
    """
    try:
        document = json.loads(text)
    except ValueError as e:
        raise MarkupParseError(f"Format is not JSON-LD: {e}") from e
    
    if isinstance(document, list):
        if context:
            for node in document:
                if isinstance(node, dict) and "@context" not in node:
                    node["@context"] = context
        return document
    
    if not isinstance(document, dict):
        raise MarkupParseError("Format is not JSON-LD: root must be a JSON object or array")
    
    document["@id"] = base_iri
    if context and "@context" not in document:
        document["@context"] = context
    return document


async def parse_jsonld(
    text: str,
    base_iri: str,
    context: Optional[Dict[str, Any]] = None,
) -> Graph:
    """Parse a JSON-LD document into a graph rooted at ``base_iri``."""
    document = prepare_document(text, base_iri, context)
    try:
        return parse_graph(json.dumps(document), base_iri, syntax="json-ld")
    except GraphParseError as e:
        raise MarkupParseError(str(e)) from e
