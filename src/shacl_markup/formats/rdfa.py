"""
RDFa input.

The RDFa processor runs in a worker thread and pushes the nodes it finds
onto a queue. The consuming coroutine accumulates them until the stream
signals completion or error, then parses the collected JSON-LD.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List

from extruct.rdfa import RDFaExtractor
from rdflib import Graph

from shacl_markup.errors import GraphParseError, MarkupParseError, StreamError
from shacl_markup.graph import parse_graph

logger = logging.getLogger(__name__)

_END = object()


def _produce(text: str, base_iri: str, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
    """Run the RDFa processor and push its nodes, then an end or error signal."""
    try:
        nodes = RDFaExtractor().extract(text, base_url=base_iri)
    except Exception as e:
        error = StreamError(f"RDFa stream failed: {e}")
        error.__cause__ = e
        loop.call_soon_threadsafe(queue.put_nowait, error)
        return
    
    for node in nodes:
        loop.call_soon_threadsafe(queue.put_nowait, node)
    loop.call_soon_threadsafe(queue.put_nowait, _END)


async def collect_rdfa(text: str, base_iri: str) -> List[Dict[str, Any]]:
    """
    Collect the expanded JSON-LD nodes of an RDFa document.
    
    Suspends until the worker signals completion or error.
    
    Raises:
        StreamError: If the RDFa processor fails
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    producer = loop.run_in_executor(None, _produce, text, base_iri, loop, queue)
    
    nodes: List[Dict[str, Any]] = []
    try:
        while True:
            event = await queue.get()
            if event is _END:
                break
            if isinstance(event, StreamError):
                raise event
            nodes.append(event)
    finally:
        await producer
    
    logger.debug(f"RDFa stream completed with {len(nodes)} nodes")
    return nodes


async def parse_rdfa(text: str, base_iri: str) -> Graph:
    """Parse HTML with embedded RDFa into a graph."""
    nodes = await collect_rdfa(text, base_iri)
    if not nodes:
        return Graph()
    
    try:
        return parse_graph(json.dumps(nodes), base_iri, syntax="json-ld")
    except GraphParseError as e:
        raise MarkupParseError(str(e)) from e
