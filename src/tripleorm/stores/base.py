"""
Graph store protocol definitions and store configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Protocol, runtime_checkable

from ..errors import StoreConfigurationError
from ..rdf import Graph, Statement, Term
from ..security.dsns import DSNConfig, parse_dsn


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise StoreConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


@dataclass
class StoreConfig:
    """
    Normalized store configuration.
    """

    url: str
    timeout: float | None = None
    options: dict[str, Any] | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "StoreConfig":
        try:
            parsed = parse_dsn(dsn)
        except ValueError as exc:
            raise StoreConfigurationError(str(exc)) from exc
        query = dict(parsed.query)

        timeout = kwargs.pop("timeout", None)
        if timeout is None and "timeout" in query:
            timeout = _parse_float(query.pop("timeout"), key="timeout")
        query.pop("timeout", None)

        options: dict[str, Any] = dict(query)
        options.update(kwargs.pop("options", None) or {})

        return cls(url=dsn, dsn=parsed, timeout=timeout, options=options or None, **kwargs)

    @classmethod
    def from_env(cls, env_var: str = "TRIPLEORM_DSN", **kwargs: Any) -> "StoreConfig":
        value = os.getenv(env_var)
        if not value:
            raise StoreConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    @property
    def driver(self) -> str:
        if self.dsn:
            return self.dsn.driver
        return self.url.split(":", 1)[0].lower()

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


@runtime_checkable
class GraphStore(Protocol):
    """
    Mutable triple store consumed by the persistence layer.
    """

    @property
    def is_connected(self) -> bool: ...

    def connect(self) -> None:
        """
        Open the underlying resources. Calling it twice is a no-op.
        """

    def disconnect(self) -> None:
        """
        Release the underlying resources. Implementations should be idempotent.
        """

    def add(self, graph: Graph) -> None:
        """
        Add every statement of ``graph`` to the default graph.
        """

    def remove(self, graph: Graph) -> None:
        """
        Remove every statement of ``graph`` from the default graph.
        """

    def triples(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        obj: Optional[Term] = None,
    ) -> Iterator[Statement]:
        """
        Yield matching statements from the default graph and every named graph.
        """


@runtime_checkable
class SupportsNamedGraphs(Protocol):
    def add_to_graph(self, graph_id: str, graph: Graph) -> None: ...

    def remove_from_graph(self, graph_id: str, graph: Graph) -> None: ...

    def graph_ids(self) -> Iterable[str]: ...


@runtime_checkable
class SupportsTransactions(Protocol):
    @property
    def in_transaction(self) -> bool: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
