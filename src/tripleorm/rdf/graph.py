"""
Statement and in-memory graph containers.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, NamedTuple, Optional

from .terms import Term, URIRef, as_term


class Statement(NamedTuple):
    subject: URIRef
    predicate: URIRef
    object: Term

    def n3(self) -> str:
        return f"{self.subject.n3()} {self.predicate.n3()} {self.object.n3()} ."


class Graph:
    """
    Insertion-ordered set of statements.
    """

    def __init__(self, statements: Iterable[Statement] | None = None) -> None:
        self._statements: Dict[Statement, None] = {}
        if statements is not None:
            self.update(statements)

    def add(self, subject: Any, predicate: Any, obj: Any) -> None:
        statement = Statement(URIRef(subject), URIRef(predicate), as_term(obj))
        self._statements[statement] = None

    def add_statement(self, statement: Statement) -> None:
        self._statements[statement] = None

    def update(self, statements: Iterable[Statement]) -> None:
        for statement in statements:
            self.add_statement(statement)

    def discard(self, statement: Statement) -> None:
        self._statements.pop(statement, None)

    def match(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        obj: Optional[Term] = None,
    ) -> Iterator[Statement]:
        for statement in self._statements:
            if subject is not None and statement.subject != subject:
                continue
            if predicate is not None and statement.predicate != predicate:
                continue
            if obj is not None and statement.object != obj:
                continue
            yield statement

    def subjects(self) -> list[URIRef]:
        return list(dict.fromkeys(statement.subject for statement in self._statements))

    def objects(self, subject: Term, predicate: Term) -> list[Term]:
        return [statement.object for statement in self.match(subject, predicate)]

    def value(self, subject: Term, predicate: Term) -> Optional[Term]:
        for statement in self.match(subject, predicate):
            return statement.object
        return None

    def __iter__(self) -> Iterator[Statement]:
        return iter(list(self._statements))

    def __len__(self) -> int:
        return len(self._statements)

    def __contains__(self, statement: object) -> bool:
        return statement in self._statements

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return set(self._statements) == set(other._statements)

    def __repr__(self) -> str:
        return f"<Graph statements={len(self)}>"
