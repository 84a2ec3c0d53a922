"""
TripleORM public package initialization.

Entities are declared as :class:`Entity` subclasses and persisted to a
graph store through a :class:`Session`.
"""

from .core.entity import Entity  # noqa: F401
from .core.fields import (
    BooleanField,
    DateField,
    DateTimeField,
    DecimalField,
    FloatField,
    IntegerField,
    StringField,
    URIField,
)  # noqa: F401
from .core.relations import CascadeType, Relation  # noqa: F401
from .errors import *  # noqa: F401,F403
from .errors import __all__ as _error_names
from .hooks import (  # noqa: F401
    LifecycleEvent,
    hooks,
    post_load,
    post_persist,
    post_remove,
    post_update,
    pre_persist,
    pre_remove,
    pre_update,
)
from .persistence import FlushMode, Session, Transaction, TransactionState  # noqa: F401
from .query import NamedQuery, Query  # noqa: F401
from .stores import MemoryStore, SQLiteStore, StoreConfig, create_store  # noqa: F401

__all__ = [
    "BooleanField",
    "CascadeType",
    "DateField",
    "DateTimeField",
    "DecimalField",
    "Entity",
    "FloatField",
    "FlushMode",
    "IntegerField",
    "LifecycleEvent",
    "MemoryStore",
    "NamedQuery",
    "Query",
    "Relation",
    "SQLiteStore",
    "Session",
    "StoreConfig",
    "StringField",
    "Transaction",
    "TransactionState",
    "URIField",
    "create_store",
    "hooks",
    "post_load",
    "post_persist",
    "post_remove",
    "post_update",
    "pre_persist",
    "pre_remove",
    "pre_update",
    *_error_names,
]
