"""
Executable query bound to a graph store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

from ..errors import EntityNotFoundError, NonUniqueResultError, QuerySyntaxError, UnsupportedOperationError
from ..rdf import Term, URIRef
from ..utils import get_logger, time_call
from .patterns import ParsedQuery, evaluate, parse_query

if TYPE_CHECKING:
    from ..stores.base import GraphStore

SLOW_QUERY_HINT = "tripleorm.slow_query_ms"
DEFAULT_SLOW_QUERY_MS = 200

ResultLoader = Callable[[type, URIRef], Any]


class Query:
    """
    Query text plus parameters, hints and paging, evaluated on demand.

    When a ``result_type`` is bound, each solution's single projected
    resource is materialised through ``loader`` as an instance of that type.
    """

    def __init__(
        self,
        store: "GraphStore",
        text: str,
        *,
        result_type: Optional[type] = None,
        loader: Optional[ResultLoader] = None,
    ) -> None:
        self.store = store
        self.text = text
        self.result_type = result_type
        self.loader = loader
        self._parameters: Dict[str, Any] = {}
        self._hints: Dict[str, Any] = {}
        self._max_results: Optional[int] = None
        self._first_result = 0
        self._parsed: Optional[ParsedQuery] = None
        self.logger = get_logger("query")

    def __repr__(self) -> str:
        return f"<Query {self.text!r}>"

    # Configuration -----------------------------------------------------
    @property
    def hints(self) -> Mapping[str, Any]:
        return dict(self._hints)

    @property
    def parameters(self) -> Mapping[str, Any]:
        return dict(self._parameters)

    @property
    def parsed(self) -> ParsedQuery:
        if self._parsed is None:
            self._parsed = parse_query(self.text)
        return self._parsed

    def set_hint(self, name: str, value: Any) -> "Query":
        self._hints[name] = value
        return self

    def set_parameter(self, name: str, value: Any) -> "Query":
        name = name.lstrip("$")
        if name not in self.parsed.parameters:
            raise QuerySyntaxError(f"Query has no parameter named ${name}")
        rdf_id = getattr(value, "rdf_id", None)
        self._parameters[name] = URIRef(rdf_id) if rdf_id is not None else value
        return self

    def set_max_results(self, value: Optional[int]) -> "Query":
        if value is not None and value < 0:
            raise ValueError("max_results cannot be negative")
        self._max_results = value
        return self

    def set_first_result(self, value: int) -> "Query":
        if value < 0:
            raise ValueError("first_result cannot be negative")
        self._first_result = value
        return self

    # Execution ---------------------------------------------------------
    def get_result_list(self) -> List[Any]:
        parsed = self.parsed
        threshold = float(self._hints.get(SLOW_QUERY_HINT, DEFAULT_SLOW_QUERY_MS))
        rows: List[Dict[str, Term]] = []
        with time_call("query.execute", self.logger, threshold_ms=threshold, query=self.text):
            for index, row in enumerate(evaluate(parsed, self.store, self._parameters)):
                if index < self._first_result:
                    continue
                if self._max_results is not None and len(rows) >= self._max_results:
                    break
                rows.append(row)

        columns = parsed.result_variables
        if self.result_type is not None:
            return [self._materialize(row, columns) for row in rows]
        if len(columns) == 1:
            return [_unwrap(row[columns[0]]) for row in rows]
        return [{name: _unwrap(value) for name, value in row.items()} for row in rows]

    def get_single_result(self) -> Any:
        previous = self._max_results
        if previous is None:
            self._max_results = 2
        try:
            results = self.get_result_list()
        finally:
            self._max_results = previous
        if not results:
            raise EntityNotFoundError(f"Query returned no results: {self.text}")
        if len(results) > 1:
            raise NonUniqueResultError(f"Query returned more than one result: {self.text}")
        return results[0]

    def execute_update(self) -> int:
        raise UnsupportedOperationError("Update queries are not supported; use Session.persist/merge/remove.")

    def _materialize(self, row: Dict[str, Term], columns: List[str]) -> Any:
        if len(columns) != 1:
            raise QuerySyntaxError("Queries with a result type must project exactly one variable")
        value = row[columns[0]]
        if not isinstance(value, URIRef):
            raise QuerySyntaxError(f"Cannot build {self.result_type.__name__} from literal {value!r}")  # type: ignore[union-attr]
        if self.loader is None:
            raise UnsupportedOperationError("Query has a result type but no loader")
        return self.loader(self.result_type, value)  # type: ignore[arg-type]


def _unwrap(term: Term) -> Any:
    if isinstance(term, URIRef):
        return term
    return term.to_python()
