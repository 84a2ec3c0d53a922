"""
Query factory resolving ad-hoc, native and named queries against a store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Optional

from ..errors import NamedQueryNotFoundError, UnsupportedOperationError
from ..rdf import URIRef
from ..utils import get_logger
from .named import NamedQuery
from .query import Query, ResultLoader

if TYPE_CHECKING:
    from ..metadata import MetadataProvider
    from ..stores.base import GraphStore


class QueryFactory:
    """
    Builds :class:`Query` objects bound to one store.

    Named queries are registered up front; a later registration under an
    existing name replaces the earlier one.
    """

    def __init__(
        self,
        store: "GraphStore",
        named_queries: Iterable[NamedQuery] = (),
        *,
        loader: Optional[ResultLoader] = None,
    ) -> None:
        self.store = store
        self.loader = loader
        self._named_queries: Dict[str, NamedQuery] = {}
        self.logger = get_logger("query.factory")
        for named_query in named_queries:
            self.add_named_query(named_query)

    @classmethod
    def from_metadata(
        cls,
        store: "GraphStore",
        metadata: "MetadataProvider",
        *,
        loader: Optional[ResultLoader] = None,
    ) -> "QueryFactory":
        declared = [
            named_query
            for entity_type in metadata.persistable_types()
            for named_query in metadata.named_queries_declared_on(entity_type)
        ]
        return cls(store, declared, loader=loader)

    @property
    def named_queries(self) -> Dict[str, NamedQuery]:
        return dict(self._named_queries)

    def add_named_query(self, named_query: NamedQuery) -> None:
        if named_query.name in self._named_queries:
            self.logger.debug("Named query '%s' redefined", named_query.name)
        self._named_queries[named_query.name] = named_query

    # ------------------------------------------------------------------ #
    def create_query(self, text: str) -> Query:
        return Query(self.store, text, loader=self.loader)

    def create_named_query(self, name: str) -> Query:
        try:
            named_query = self._named_queries[name]
        except KeyError as exc:
            raise NamedQueryNotFoundError(f"Query named '{name}' does not exist.") from exc
        query = self.create_query(named_query.query)
        for hint, value in named_query.hints.items():
            query.set_hint(hint, value)
        return query

    def create_native_query(
        self,
        text: str,
        result_type: Optional[type] = None,
        *,
        result_set_mapping: Optional[str] = None,
    ) -> Query:
        if result_set_mapping is not None:
            raise UnsupportedOperationError("Result set mappings are not supported.")
        query = self.create_query(text)
        if result_type is not None:
            query.result_type = result_type
        return query

    def create_exists_query(self, identity: str) -> Query:
        return self.create_query(f"SELECT ?p WHERE {{ {URIRef(identity).n3()} ?p ?o }}").set_max_results(1)
