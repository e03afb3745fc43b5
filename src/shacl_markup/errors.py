"""
Exception hierarchy for SHACL-Markup.

Errors are raised close to where they are detected and re-exported from
the package root.
"""


class ShaclMarkupError(Exception):
    """Base class for all SHACL-Markup errors."""
    pass


class GraphParseError(ShaclMarkupError):
    """Statement text could not be parsed into a graph."""
    pass


class MarkupParseError(ShaclMarkupError):
    """A single markup format could not be converted to a graph."""
    pass


class StreamError(MarkupParseError):
    """The incremental RDFa parse signalled an error before completion."""
    pass


class FormatDetectionError(ShaclMarkupError):
    """
    None of the accepted markup formats produced a non-empty graph.
    
    Attributes:
        attempts: The per-format attempt results, in the order tried
    """
    
    def __init__(self, message: str, attempts=None):
        super().__init__(message)
        self.attempts = list(attempts or [])


class ShapeLookupError(ShaclMarkupError):
    """
    The container shape of a failing shape could not be resolved.
    
    Raised when zero or several shapes declare the failing shape through
    ``sh:property``, or when the container IRI yields an empty service name.
    """
    
    def __init__(self, message: str, shape=None, candidates=None):
        super().__init__(message)
        self.shape = shape
        self.candidates = list(candidates or [])
