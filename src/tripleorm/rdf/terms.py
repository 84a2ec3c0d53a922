"""
RDF term types: IRIs and typed literals.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Union

_XSD = "http://www.w3.org/2001/XMLSchema#"

_IRI_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:[^\s<>\"{}|\\^`]+$")


class URIRef(str):
    """
    Absolute IRI naming a resource.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"URIRef({str.__repr__(self)})"

    def n3(self) -> str:
        return f"<{self}>"


def is_valid_iri(value: Any) -> bool:
    return isinstance(value, str) and bool(_IRI_RE.match(value))


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in {"true", "1"}:
        return True
    if lowered in {"false", "0"}:
        return False
    raise ValueError(f"Invalid boolean lexical form '{text}'")


_PARSERS = {
    _XSD + "string": str,
    _XSD + "integer": int,
    _XSD + "decimal": Decimal,
    _XSD + "double": float,
    _XSD + "boolean": _parse_bool,
    _XSD + "dateTime": datetime.fromisoformat,
    _XSD + "date": date.fromisoformat,
}


@dataclass(frozen=True)
class Literal:
    """
    Typed literal value. ``value`` holds the Python representation.
    """

    value: Any
    datatype: URIRef = URIRef(_XSD + "string")

    @classmethod
    def from_python(cls, value: Any, datatype: str | None = None) -> "Literal":
        if isinstance(value, Literal):
            return value
        if datatype is not None:
            return cls(value, URIRef(datatype))
        # bool before int, datetime before date: both are subclasses
        if isinstance(value, bool):
            return cls(value, URIRef(_XSD + "boolean"))
        if isinstance(value, int):
            return cls(value, URIRef(_XSD + "integer"))
        if isinstance(value, float):
            return cls(value, URIRef(_XSD + "double"))
        if isinstance(value, Decimal):
            return cls(value, URIRef(_XSD + "decimal"))
        if isinstance(value, datetime):
            return cls(value, URIRef(_XSD + "dateTime"))
        if isinstance(value, date):
            return cls(value, URIRef(_XSD + "date"))
        if isinstance(value, str):
            return cls(value)
        raise TypeError(f"Cannot represent {type(value).__name__} value {value!r} as a literal")

    @classmethod
    def from_lexical(cls, text: str, datatype: str | None = None) -> "Literal":
        dt = URIRef(datatype or _XSD + "string")
        parser = _PARSERS.get(dt)
        if parser is None:
            return cls(text, dt)
        try:
            return cls(parser(text), dt)
        except (ValueError, InvalidOperation) as exc:
            raise ValueError(f"Invalid lexical form '{text}' for datatype <{dt}>") from exc

    @property
    def lexical(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        if isinstance(self.value, (datetime, date)):
            return self.value.isoformat()
        return str(self.value)

    def to_python(self) -> Any:
        return self.value

    def n3(self) -> str:
        escaped = self.lexical.replace("\\", "\\\\").replace('"', '\\"')
        if self.datatype == _XSD + "string":
            return f'"{escaped}"'
        return f'"{escaped}"^^<{self.datatype}>'


Term = Union[URIRef, Literal]


def as_term(value: Any) -> Term:
    if isinstance(value, (URIRef, Literal)):
        return value
    return Literal.from_python(value)
