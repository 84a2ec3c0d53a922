"""
Transaction handle and the adapter giving every store begin/commit/rollback.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Generator, Iterable, Iterator, Optional, Protocol, Union

from ..errors import TransactionError, UnsupportedOperationError
from ..rdf import Graph, Statement, Term
from ..stores.base import GraphStore, SupportsNamedGraphs, SupportsTransactions
from ..utils import get_logger


class TransactionalStore(GraphStore, SupportsTransactions, Protocol):
    pass


class NaiveTransactionalStore:
    """
    Gives a non-transactional store the begin/commit/rollback surface.

    This is advisory bookkeeping only. It offers no isolation and no
    atomicity: every write reaches the wrapped store immediately, and
    ``rollback`` cannot undo writes already applied. It records the
    transaction boundaries and counts the statements written in between so a
    rollback can report how much data it left behind.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store
        self.statements_applied = 0
        self._active = False
        self.logger = get_logger("persistence.transaction")

    # GraphStore -------------------------------------------------------------
    @property
    def is_connected(self) -> bool:
        return self.store.is_connected

    def connect(self) -> None:
        self.store.connect()

    def disconnect(self) -> None:
        self.store.disconnect()

    def add(self, graph: Graph) -> None:
        self.store.add(graph)
        self._record(graph)

    def remove(self, graph: Graph) -> None:
        self.store.remove(graph)
        self._record(graph)

    def triples(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        obj: Optional[Term] = None,
    ) -> Iterator[Statement]:
        return self.store.triples(subject, predicate, obj)

    # SupportsNamedGraphs ----------------------------------------------------
    @property
    def supports_named_graphs(self) -> bool:
        return isinstance(self.store, SupportsNamedGraphs)

    def add_to_graph(self, graph_id: str, graph: Graph) -> None:
        self._named_graphs().add_to_graph(graph_id, graph)
        self._record(graph)

    def remove_from_graph(self, graph_id: str, graph: Graph) -> None:
        self._named_graphs().remove_from_graph(graph_id, graph)
        self._record(graph)

    def graph_ids(self) -> Iterable[str]:
        return self._named_graphs().graph_ids()

    def _named_graphs(self) -> SupportsNamedGraphs:
        if not isinstance(self.store, SupportsNamedGraphs):
            raise UnsupportedOperationError(f"{type(self.store).__name__} does not support named graphs.")
        return self.store

    # SupportsTransactions ---------------------------------------------------
    @property
    def in_transaction(self) -> bool:
        return self._active

    def begin(self) -> None:
        self._active = True
        self.statements_applied = 0
        self.logger.debug("Advisory transaction started on %s", type(self.store).__name__)

    def commit(self) -> None:
        self.logger.debug("Advisory transaction committed (%d statements)", self.statements_applied)
        self._active = False

    def rollback(self) -> None:
        if self.statements_applied:
            self.logger.warning(
                "Rollback on %s cannot undo %d statement(s) already written",
                type(self.store).__name__,
                self.statements_applied,
            )
        self._active = False

    def _record(self, graph: Graph) -> None:
        if self._active:
            self.statements_applied += len(graph)


def as_transactional(store: GraphStore) -> Union[TransactionalStore, NaiveTransactionalStore]:
    """
    Return ``store`` when it manages its own transactions, otherwise wrap it.
    """
    if isinstance(store, SupportsTransactions):
        return store
    return NaiveTransactionalStore(store)


class TransactionState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """
    Resource-local transaction handle owned by a session.

    A handle is used once: COMMITTED and ROLLED_BACK are final, and the
    session hands out a fresh INACTIVE handle for the next transaction.
    """

    def __init__(self, store: Union[TransactionalStore, NaiveTransactionalStore]) -> None:
        self.store = store
        self.state = TransactionState.INACTIVE
        self._rollback_only = False

    @property
    def is_active(self) -> bool:
        return self.state is TransactionState.ACTIVE

    @property
    def is_finished(self) -> bool:
        return self.state in (TransactionState.COMMITTED, TransactionState.ROLLED_BACK)

    @property
    def rollback_only(self) -> bool:
        return self._rollback_only

    def begin(self) -> None:
        if self.state is not TransactionState.INACTIVE:
            raise TransactionError(f"Cannot begin a transaction that is {self.state.value}.")
        self.store.begin()
        self.state = TransactionState.ACTIVE
        self._rollback_only = False

    def commit(self) -> None:
        self._require_active("commit")
        if self._rollback_only:
            self.rollback()
            raise TransactionError("Transaction was marked rollback-only and has been rolled back.")
        self.store.commit()
        self.state = TransactionState.COMMITTED

    def rollback(self) -> None:
        self._require_active("roll back")
        try:
            self.store.rollback()
        finally:
            self.state = TransactionState.ROLLED_BACK
            self._rollback_only = False

    def set_rollback_only(self) -> None:
        self._require_active("mark rollback-only")
        self._rollback_only = True

    def _require_active(self, action: str) -> None:
        if not self.is_active:
            raise TransactionError(f"No active transaction to {action}.")

    def __repr__(self) -> str:
        return f"<Transaction {self.state.value}>"


@contextmanager
def transaction(handle: Transaction) -> Generator[Transaction, None, None]:
    handle.begin()
    try:
        yield handle
    except Exception:
        if handle.is_active:
            handle.rollback()
        raise
    else:
        handle.commit()
