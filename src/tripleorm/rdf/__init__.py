"""
Graph data model: terms, statements and graphs.
"""

from .graph import Graph, Statement
from .namespaces import RDF, RDF_TYPE, RDFS, XSD, Namespace
from .terms import Literal, Term, URIRef, as_term, is_valid_iri

__all__ = [
    "Graph",
    "Literal",
    "Namespace",
    "RDF",
    "RDFS",
    "RDF_TYPE",
    "Statement",
    "Term",
    "URIRef",
    "XSD",
    "as_term",
    "is_valid_iri",
]
