"""
In-process graph store keeping statements in memory.
"""

from __future__ import annotations

from threading import RLock
from typing import Dict, Iterable, Iterator, Optional, Set

from ..errors import StoreConnectionError
from ..rdf import Graph, Statement, Term
from ..utils import get_logger

DEFAULT_GRAPH = ""


class MemoryStore:
    """
    Store holding a default graph plus any number of named graphs.

    Writes are applied immediately; there is no native transaction support,
    so sessions wrap it in :class:`~tripleorm.persistence.transaction.NaiveTransactionalStore`.
    """

    def __init__(self, graph: Graph | None = None) -> None:
        self._graphs: Dict[str, Set[Statement]] = {DEFAULT_GRAPH: set()}
        self._connected = False
        self._lock = RLock()
        self.logger = get_logger("stores.memory")
        if graph is not None:
            self._graphs[DEFAULT_GRAPH].update(graph)

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise StoreConnectionError("MemoryStore is not connected.")

    # ------------------------------------------------------------------ #
    # Statements
    # ------------------------------------------------------------------ #
    def add(self, graph: Graph) -> None:
        self.add_to_graph(DEFAULT_GRAPH, graph)

    def remove(self, graph: Graph) -> None:
        self.remove_from_graph(DEFAULT_GRAPH, graph)

    def add_to_graph(self, graph_id: str, graph: Graph) -> None:
        self._ensure_connected()
        with self._lock:
            self._graphs.setdefault(str(graph_id), set()).update(graph)
        self.logger.debug("Added %s statements", len(graph), extra={"graph": graph_id or "default"})

    def remove_from_graph(self, graph_id: str, graph: Graph) -> None:
        self._ensure_connected()
        with self._lock:
            statements = self._graphs.get(str(graph_id))
            if statements is None:
                return
            statements.difference_update(graph)
            if graph_id != DEFAULT_GRAPH and not statements:
                del self._graphs[str(graph_id)]
        self.logger.debug("Removed %s statements", len(graph), extra={"graph": graph_id or "default"})

    def graph_ids(self) -> Iterable[str]:
        with self._lock:
            return [graph_id for graph_id in self._graphs if graph_id != DEFAULT_GRAPH]

    def triples(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        obj: Optional[Term] = None,
    ) -> Iterator[Statement]:
        self._ensure_connected()
        with self._lock:
            seen: Set[Statement] = set()
            matches = []
            for statements in self._graphs.values():
                for statement in statements:
                    if subject is not None and statement.subject != subject:
                        continue
                    if predicate is not None and statement.predicate != predicate:
                        continue
                    if obj is not None and statement.object != obj:
                        continue
                    if statement not in seen:
                        seen.add(statement)
                        matches.append(statement)
        return iter(matches)

    def graph(self, graph_id: str = DEFAULT_GRAPH) -> Graph:
        with self._lock:
            return Graph(self._graphs.get(str(graph_id), ()))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(statements) for statements in self._graphs.values())
