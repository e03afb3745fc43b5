"""
Markup format converters.

Each converter turns document text into a graph, or raises
MarkupParseError. Formats, in detection priority order:
- JSON-LD documents
- HTML with embedded Microdata
- HTML with embedded RDFa
"""

from shacl_markup.formats.jsonld import parse_jsonld
from shacl_markup.formats.microdata import parse_microdata, microdata_to_ntriples
from shacl_markup.formats.rdfa import parse_rdfa

__all__ = [
    "parse_jsonld",
    "parse_microdata",
    "microdata_to_ntriples",
    "parse_rdfa",
]
