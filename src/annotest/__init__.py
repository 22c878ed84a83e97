"""Annotest package root."""

from annotest.annotations import Query, parse_queries
from annotest.exceptions import EngineError, NeverThrown, SourceFileError
from annotest.invariants import never

__all__ = [
    "__version__",
    "EngineError",
    "NeverThrown",
    "Query",
    "SourceFileError",
    "never",
    "parse_queries",
]

__version__ = "0.1.0"
