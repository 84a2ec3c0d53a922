"""
Well-known vocabulary IRIs.
"""

from __future__ import annotations

from .terms import URIRef


class Namespace(str):
    """
    IRI prefix producing terms by attribute or item access.
    """

    def term(self, name: str) -> URIRef:
        return URIRef(f"{self}{name}")

    def __getattr__(self, name: str) -> URIRef:
        if name.startswith("__"):
            raise AttributeError(name)
        return self.term(name)

    def __getitem__(self, name):  # type: ignore[override]
        if isinstance(name, str):
            return self.term(name)
        return str.__getitem__(self, name)


RDF = Namespace("http://www.w3.org/1999/02/22-rdf-syntax-ns#")
RDFS = Namespace("http://www.w3.org/2000/01/rdf-schema#")
XSD = Namespace("http://www.w3.org/2001/XMLSchema#")

RDF_TYPE = RDF.type

XSD_STRING = XSD.string
XSD_INTEGER = XSD.integer
XSD_DECIMAL = XSD.decimal
XSD_DOUBLE = XSD.double
XSD_BOOLEAN = XSD.boolean
XSD_DATETIME = XSD.dateTime
XSD_DATE = XSD.date
