"""
Query construction and execution APIs for TripleORM.
"""

from .factory import QueryFactory
from .named import NamedQuery
from .patterns import ParsedQuery, TriplePattern, evaluate, parse_query
from .query import SLOW_QUERY_HINT, Query

__all__ = [
    "NamedQuery",
    "ParsedQuery",
    "Query",
    "QueryFactory",
    "SLOW_QUERY_HINT",
    "TriplePattern",
    "evaluate",
    "parse_query",
]
