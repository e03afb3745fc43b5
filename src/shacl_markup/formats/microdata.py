"""
Microdata input.

Items are extracted with extruct and written out as N-Triples. Subjects of
items without an ``itemid`` become blank nodes labelled ``_:0``, ``_:1``, ...
in document order; ``_:0``, the first such item, is the default subject and
is written as the base URL when one is given. Property values taken from
link attributes (``href``, ``src``, ``data``) are written as IRIs.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

from extruct.w3cmicrodata import MicrodataExtractor
from rdflib import Graph, URIRef
from rdflib.namespace import RDF

from shacl_markup.errors import GraphParseError, MarkupParseError
from shacl_markup.graph import parse_graph

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "_:0"

# Elements whose microdata value is a URL (W3C Microdata, "Values")
URL_ELEMENTS = frozenset({
    "a", "area", "link",
    "audio", "embed", "iframe", "img", "source", "track", "video",
    "object",
})


class LinkedMicrodataExtractor(MicrodataExtractor):
    """
    extruct's microdata extractor, keeping URL property values apart.
    
    Values read from link attributes are returned as URIRef instead of
    plain strings so they can be written as IRIs.
    """
    
    def _extract_property_value(self, node, items_seen, base_url, itemids, force=False):
        value = super()._extract_property_value(
            node, items_seen=items_seen, base_url=base_url, itemids=itemids, force=force
        )
        if isinstance(value, str) and node.tag in URL_ELEMENTS:
            return URIRef(value)
        return value


def _vocabulary(type_iri: str) -> str:
    """Vocabulary of an item type: the type IRI without its final segment."""
    cut = max(type_iri.rfind("/"), type_iri.rfind("#"))
    return type_iri[:cut + 1] if cut >= 0 else ""


def _is_absolute(name: str) -> bool:
    return bool(urlparse(name).scheme)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else [value]


def _literal(value: str) -> str:
    """N-Triples form of a plain literal; newlines are escaped to keep one statement per line."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class _NTriplesWriter:
    """Writes extruct microdata items as N-Triples lines."""
    
    def __init__(self, base_iri: Optional[str] = None):
        self.base_iri = base_iri or ""
        self.lines: List[str] = []
        self._labels = itertools.count()
    
    def _subject(self, item: Dict[str, Any]) -> str:
        if item.get("id"):
            return URIRef(urljoin(self.base_iri, item["id"])).n3()
        label = f"_:{next(self._labels)}"
        if label == DEFAULT_SUBJECT and self.base_iri:
            return URIRef(self.base_iri).n3()
        return label
    
    def write_item(self, item: Dict[str, Any], vocab: str = "") -> str:
        """Emit the statements of one item and return its subject term."""
        subject = self._subject(item)
        
        types = [t for t in _as_list(item.get("type", [])) if t]
        for type_iri in types:
            self.lines.append(f"{subject} {RDF.type.n3()} {URIRef(type_iri).n3()} .")
        if types:
            vocab = _vocabulary(types[0])
        
        for name, values in (item.get("properties") or {}).items():
            if _is_absolute(name):
                predicate = URIRef(name)
            elif vocab:
                predicate = URIRef(vocab + name)
            else:
                logger.debug(f"Skipping property without vocabulary: {name}")
                continue
            
            for value in _as_list(values):
                if isinstance(value, dict):
                    obj = self.write_item(value, vocab)
                elif isinstance(value, URIRef):
                    obj = value.n3()
                else:
                    obj = _literal(str(value))
                self.lines.append(f"{subject} {predicate.n3()} {obj} .")
        
        return subject


def microdata_to_ntriples(items: List[Dict[str, Any]], base_iri: Optional[str] = None) -> str:
    """
    Convert extracted microdata items to N-Triples text.
    
    Args:
        items: Top-level items as returned by LinkedMicrodataExtractor
        base_iri: Base used to resolve relative ``itemid`` values and
            written in place of the default subject ``_:0``
        
    Returns:
        N-Triples text, one statement per line
    """
    writer = _NTriplesWriter(base_iri)
    for item in items:
        writer.write_item(item)
    return "".join(f"{line}\n" for line in writer.lines)


def extract_items(text: str, base_iri: str) -> List[Dict[str, Any]]:
    """Extract top-level microdata items from HTML text."""
    try:
        return LinkedMicrodataExtractor().extract(text, base_url=base_iri)
    except Exception as e:
        raise MarkupParseError(f"Format is not Microdata: {e}") from e


async def parse_microdata(text: str, base_iri: str) -> Graph:
    """Parse HTML with embedded microdata into a graph."""
    items = extract_items(text, base_iri)
    try:
        ntriples = microdata_to_ntriples(items, base_iri)
    except Exception as e:
        raise MarkupParseError(f"Microdata items cannot be written as statements: {e}") from e
    if not ntriples:
        raise MarkupParseError("Format is not Microdata")
    
    try:
        return parse_graph(ntriples, base_iri, syntax="nt")
    except GraphParseError as e:
        raise MarkupParseError(str(e)) from e
