"""
Graph store interfaces and implementations.
"""

from __future__ import annotations

from ..errors import (
    StoreConfigurationError,
    StoreConnectionError,
    StoreError,
    StoreExecutionError,
    StoreTransactionError,
)
from .base import GraphStore, StoreConfig, SupportsNamedGraphs, SupportsTransactions
from .memory import MemoryStore
from .sqlite import SQLiteStore


def create_store(config: StoreConfig | str) -> GraphStore:
    """
    Instantiate the store implementation named by the config's driver.
    """
    if isinstance(config, str):
        config = StoreConfig.from_dsn(config)
    if config.driver == "memory":
        return MemoryStore()
    if config.driver == "sqlite":
        return SQLiteStore(config)
    raise StoreConfigurationError(f"No graph store available for '{config.redacted_dsn()}'")


__all__ = [
    "GraphStore",
    "MemoryStore",
    "SQLiteStore",
    "StoreConfig",
    "StoreConfigurationError",
    "StoreConnectionError",
    "StoreError",
    "StoreExecutionError",
    "StoreTransactionError",
    "SupportsNamedGraphs",
    "SupportsTransactions",
    "create_store",
]
