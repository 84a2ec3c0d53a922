"""
Persistence layer: session, transactions, cascades and listener caching.
"""

from .cascade import CascadeType, cascade
from .listeners import ListenerCache, default_listener_factory
from .session import FlushMode, Session
from .transaction import (
    NaiveTransactionalStore,
    Transaction,
    TransactionalStore,
    TransactionState,
    as_transactional,
    transaction,
)

__all__ = [
    "CascadeType",
    "FlushMode",
    "ListenerCache",
    "NaiveTransactionalStore",
    "Session",
    "Transaction",
    "TransactionState",
    "TransactionalStore",
    "as_transactional",
    "cascade",
    "default_listener_factory",
    "transaction",
]
