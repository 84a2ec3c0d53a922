"""
Triple-pattern query parsing and evaluation against a graph store.

The dialect is a basic graph pattern with an optional projection::

    SELECT DISTINCT ?name WHERE {
        ?person a <http://example.org/Person> .
        ?person <http://example.org/name> ?name
    }

Terms are ``?variables``, ``<iris>``, ``a`` (rdf:type), quoted strings with an
optional ``^^<datatype>``, integers, decimals, ``true``/``false`` and
``$parameters`` bound at execution time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..errors import QuerySyntaxError
from ..rdf import RDF_TYPE, Literal, Term, URIRef, as_term

if TYPE_CHECKING:
    from ..stores.base import GraphStore


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Parameter:
    name: str


PatternTerm = Union[Variable, Parameter, URIRef, Literal]
Bindings = Dict[str, Term]


@dataclass(frozen=True)
class TriplePattern:
    subject: PatternTerm
    predicate: PatternTerm
    object: PatternTerm

    def terms(self) -> Tuple[PatternTerm, PatternTerm, PatternTerm]:
        return (self.subject, self.predicate, self.object)


@dataclass
class ParsedQuery:
    patterns: List[TriplePattern]
    projection: Optional[List[str]] = None
    distinct: bool = False
    variables: List[str] = field(default_factory=list)
    parameters: List[str] = field(default_factory=list)

    @property
    def result_variables(self) -> List[str]:
        return self.projection if self.projection is not None else self.variables


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<var>\?[A-Za-z_]\w*)
  | (?P<param>\$[A-Za-z_]\w*)
  | (?P<iri><[^<>\s]*>)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<dt>\^\^)
  | (?P<decimal>[-+]?\d+\.\d+)
  | (?P<integer>[-+]?\d+)
  | (?P<punct>[{}.*])
  | (?P<word>[A-Za-z_]\w*)
    """,
    re.VERBOSE,
)

_ESCAPE_RE = re.compile(r"\\(.)")


def tokenize(text: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    position = 0
    while position < len(text):
        match = _TOKEN_RE.match(text, position)
        if match is None:
            raise QuerySyntaxError(f"Unexpected character {text[position]!r} at offset {position}")
        kind = match.lastgroup or ""
        if kind != "ws":
            tokens.append((kind, match.group()))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.tokens = tokenize(text)
        self.position = 0

    def peek(self) -> Tuple[str, str] | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def take(self) -> Tuple[str, str]:
        token = self.peek()
        if token is None:
            raise QuerySyntaxError("Unexpected end of query")
        self.position += 1
        return token

    def accept_word(self, word: str) -> bool:
        token = self.peek()
        if token and token[0] == "word" and token[1].upper() == word:
            self.position += 1
            return True
        return False

    def accept_punct(self, punct: str) -> bool:
        token = self.peek()
        if token and token == ("punct", punct):
            self.position += 1
            return True
        return False

    def parse(self) -> ParsedQuery:
        projection: Optional[List[str]] = None
        distinct = False
        if self.accept_word("SELECT"):
            distinct = self.accept_word("DISTINCT")
            projection = []
            if not self.accept_punct("*"):
                while self.peek() and self.peek()[0] == "var":  # type: ignore[index]
                    projection.append(self.take()[1][1:])
                if not projection:
                    raise QuerySyntaxError("SELECT requires '*' or at least one variable")
            else:
                projection = None
            self.accept_word("WHERE")

        braced = self.accept_punct("{")
        patterns: List[TriplePattern] = []
        while self.peek() is not None and self.peek() != ("punct", "}"):
            patterns.append(TriplePattern(self.term(), self.term(), self.term()))
            if not self.accept_punct("."):
                break
        if braced and not self.accept_punct("}"):
            raise QuerySyntaxError("Missing closing '}'")
        if self.peek() is not None:
            raise QuerySyntaxError(f"Unexpected token {self.peek()[1]!r}")  # type: ignore[index]
        if not patterns:
            raise QuerySyntaxError("Query contains no triple patterns")

        variables: List[str] = []
        parameters: List[str] = []
        for pattern in patterns:
            for term in pattern.terms():
                if isinstance(term, Variable) and term.name not in variables:
                    variables.append(term.name)
                elif isinstance(term, Parameter) and term.name not in parameters:
                    parameters.append(term.name)
        for name in projection or ():
            if name not in variables:
                raise QuerySyntaxError(f"Projected variable ?{name} does not appear in the patterns")
        return ParsedQuery(patterns, projection, distinct, variables, parameters)

    def term(self) -> PatternTerm:
        kind, value = self.take()
        if kind == "var":
            return Variable(value[1:])
        if kind == "param":
            return Parameter(value[1:])
        if kind == "iri":
            return URIRef(value[1:-1])
        if kind == "string":
            lexical = _ESCAPE_RE.sub(r"\1", value[1:-1])
            token = self.peek()
            if token and token[0] == "dt":
                self.take()
                dt_kind, dt_value = self.take()
                if dt_kind != "iri":
                    raise QuerySyntaxError("Expected datatype IRI after '^^'")
                try:
                    return Literal.from_lexical(lexical, dt_value[1:-1])
                except ValueError as exc:
                    raise QuerySyntaxError(str(exc)) from exc
            return Literal(lexical)
        if kind == "integer":
            return Literal.from_python(int(value))
        if kind == "decimal":
            return Literal.from_python(Decimal(value))
        if kind == "word":
            if value == "a":
                return RDF_TYPE
            if value.lower() in {"true", "false"}:
                return Literal.from_python(value.lower() == "true")
        raise QuerySyntaxError(f"Unexpected token {value!r}")


def parse_query(text: str) -> ParsedQuery:
    return _Parser(text).parse()


def _resolve(term: PatternTerm, bindings: Bindings, parameters: Mapping[str, Term]) -> Optional[Term]:
    if isinstance(term, Variable):
        return bindings.get(term.name)
    if isinstance(term, Parameter):
        try:
            return parameters[term.name]
        except KeyError as exc:
            raise QuerySyntaxError(f"Parameter ${term.name} is not bound") from exc
    return term


def evaluate(
    parsed: ParsedQuery,
    store: "GraphStore",
    parameters: Mapping[str, Any] | None = None,
) -> Iterator[Bindings]:
    """
    Yield one binding per solution, joining patterns left to right.
    """
    bound = {name: as_term(value) for name, value in (parameters or {}).items()}
    solutions: List[Bindings] = [{}]
    for pattern in parsed.patterns:
        next_solutions: List[Bindings] = []
        for bindings in solutions:
            s, p, o = (_resolve(term, bindings, bound) for term in pattern.terms())
            for statement in store.triples(s, p, o):
                extended = _extend(bindings, pattern, statement)
                if extended is not None:
                    next_solutions.append(extended)
        solutions = next_solutions
        if not solutions:
            break

    seen = set()
    for bindings in solutions:
        row = {name: bindings[name] for name in parsed.result_variables}
        if parsed.distinct:
            key = tuple(row[name] for name in parsed.result_variables)
            if key in seen:
                continue
            seen.add(key)
        yield row


def _extend(bindings: Bindings, pattern: TriplePattern, statement: Tuple[Term, Term, Term]) -> Optional[Bindings]:
    extended = dict(bindings)
    for term, value in zip(pattern.terms(), statement):
        if not isinstance(term, Variable):
            continue
        existing = extended.get(term.name)
        if existing is not None and existing != value:
            return None
        extended[term.name] = value
    return extended
