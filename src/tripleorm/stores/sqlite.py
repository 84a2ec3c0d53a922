"""
SQLite-backed graph store with native transaction support.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..errors import StoreConfigurationError, StoreConnectionError, StoreExecutionError, StoreTransactionError
from ..rdf import Graph, Literal, Statement, Term, URIRef
from ..security import redact_statements
from ..utils import get_logger, time_call
from .base import StoreConfig

DEFAULT_GRAPH = ""

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS statements ("
    "graph TEXT NOT NULL, "
    "subject TEXT NOT NULL, "
    "predicate TEXT NOT NULL, "
    "object_kind TEXT NOT NULL, "
    "object_value TEXT NOT NULL, "
    "datatype TEXT NOT NULL DEFAULT '', "
    "PRIMARY KEY (graph, subject, predicate, object_kind, object_value, datatype))"
)
_INDEX = "CREATE INDEX IF NOT EXISTS statements_subject ON statements (subject, predicate)"

Row = Tuple[str, str, str, str, str, str]


@dataclass(slots=True)
class SQLiteConnectionState:
    connection: sqlite3.Connection


class SQLiteStore:
    """
    Store persisting statements in a single SQLite table.

    The connection runs in autocommit mode so writes outside a transaction
    are durable as soon as they return; :meth:`begin` opens an explicit
    transaction that :meth:`rollback` fully undoes.
    """

    def __init__(self, config: StoreConfig | str = "sqlite:///:memory:", *, slow_query_ms: int = 200) -> None:
        self.config = StoreConfig.from_dsn(config) if isinstance(config, str) else config
        self.slow_query_ms = slow_query_ms
        self._state: SQLiteConnectionState | None = None
        self.logger = get_logger("stores.sqlite")

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    @property
    def is_connected(self) -> bool:
        return self._state is not None

    def connect(self) -> None:
        if self._state:
            return
        path = self._database_path(self.config)
        timeout = self.config.timeout if self.config.timeout is not None else 5.0
        try:
            connection = sqlite3.connect(path, isolation_level=None, timeout=timeout, check_same_thread=False)
            journal_mode = (self.config.options or {}).get("journal_mode")
            if journal_mode:
                connection.execute(f"PRAGMA journal_mode = {self._pragma_value(journal_mode)}")
            connection.execute(_SCHEMA)
            connection.execute(_INDEX)
        except sqlite3.Error as exc:
            raise StoreConnectionError(f"Unable to open {self.config.descriptive_label()}: {exc}") from exc
        self._state = SQLiteConnectionState(connection)
        self.logger.debug("Connected", extra={"dsn": self.config.redacted_dsn()})

    def disconnect(self) -> None:
        if self._state:
            self._state.connection.close()
            self._state = None

    def _ensure_connection(self) -> sqlite3.Connection:
        if not self._state:
            raise StoreConnectionError("SQLiteStore is not connected.")
        return self._state.connection

    # ------------------------------------------------------------------ #
    # Statements
    # ------------------------------------------------------------------ #
    def add(self, graph: Graph) -> None:
        self.add_to_graph(DEFAULT_GRAPH, graph)

    def remove(self, graph: Graph) -> None:
        self.remove_from_graph(DEFAULT_GRAPH, graph)

    def add_to_graph(self, graph_id: str, graph: Graph) -> None:
        rows = [self._encode(str(graph_id), statement) for statement in graph]
        self._executemany(
            "INSERT OR IGNORE INTO statements "
            "(graph, subject, predicate, object_kind, object_value, datatype) VALUES (?, ?, ?, ?, ?, ?)",
            rows,
        )

    def remove_from_graph(self, graph_id: str, graph: Graph) -> None:
        rows = [self._encode(str(graph_id), statement) for statement in graph]
        self._executemany(
            "DELETE FROM statements WHERE graph = ? AND subject = ? AND predicate = ? "
            "AND object_kind = ? AND object_value = ? AND datatype = ?",
            rows,
        )

    def graph_ids(self) -> Iterable[str]:
        cursor = self._execute("SELECT DISTINCT graph FROM statements WHERE graph != ? ORDER BY graph", (DEFAULT_GRAPH,))
        return [row[0] for row in cursor.fetchall()]

    def triples(
        self,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        obj: Optional[Term] = None,
    ) -> Iterator[Statement]:
        clauses: List[str] = []
        params: List[Any] = []
        if subject is not None:
            clauses.append("subject = ?")
            params.append(str(subject))
        if predicate is not None:
            clauses.append("predicate = ?")
            params.append(str(predicate))
        if obj is not None:
            kind, value, datatype = self._encode_object(obj)
            clauses.extend(["object_kind = ?", "object_value = ?", "datatype = ?"])
            params.extend([kind, value, datatype])
        sql = "SELECT DISTINCT subject, predicate, object_kind, object_value, datatype FROM statements"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        cursor = self._execute(sql, params)
        return iter([self._decode(row) for row in cursor.fetchall()])

    def graph(self, graph_id: str = DEFAULT_GRAPH) -> Graph:
        cursor = self._execute(
            "SELECT subject, predicate, object_kind, object_value, datatype FROM statements WHERE graph = ?",
            (str(graph_id),),
        )
        return Graph(self._decode(row) for row in cursor.fetchall())

    def __len__(self) -> int:
        return self._execute("SELECT COUNT(*) FROM statements").fetchone()[0]

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    @property
    def in_transaction(self) -> bool:
        return bool(self._state and self._state.connection.in_transaction)

    def begin(self) -> None:
        self._transaction_statement("BEGIN")

    def commit(self) -> None:
        self._transaction_statement("COMMIT")

    def rollback(self) -> None:
        self._transaction_statement("ROLLBACK")

    def _transaction_statement(self, sql: str) -> None:
        connection = self._ensure_connection()
        try:
            connection.execute(sql)
        except sqlite3.Error as exc:
            raise StoreTransactionError(f"{sql} failed: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        connection = self._ensure_connection()
        try:
            with time_call("sqlite.execute", self.logger, threshold_ms=self.slow_query_ms, sql=sql):
                return connection.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreExecutionError(f"Statement failed: {exc}") from exc

    def _executemany(self, sql: str, rows: List[Row]) -> None:
        connection = self._ensure_connection()
        if not rows:
            return
        try:
            with time_call("sqlite.executemany", self.logger, threshold_ms=self.slow_query_ms, sql=sql):
                connection.executemany(sql, rows)
        except sqlite3.Error as exc:
            raise StoreExecutionError(f"Statement failed: {exc}") from exc
        self.logger.debug(
            "SQL executed for %s statements",
            len(rows),
            extra={"sql": sql, "params": redact_statements((row[1], row[2], row[4]) for row in rows)},
        )

    @staticmethod
    def _database_path(config: StoreConfig) -> str:
        if config.driver != "sqlite":
            raise StoreConfigurationError(f"SQLiteStore cannot open '{config.redacted_dsn()}'")
        database = config.dsn.database if config.dsn else None
        return database or ":memory:"

    @staticmethod
    def _pragma_value(value: str) -> str:
        if not value.isalpha():
            raise StoreConfigurationError(f"Invalid journal_mode '{value}'")
        return value.upper()

    @staticmethod
    def _encode_object(obj: Term) -> Tuple[str, str, str]:
        if isinstance(obj, Literal):
            return "literal", obj.lexical, str(obj.datatype)
        return "uri", str(obj), ""

    @classmethod
    def _encode(cls, graph_id: str, statement: Statement) -> Row:
        kind, value, datatype = cls._encode_object(statement.object)
        return (graph_id, str(statement.subject), str(statement.predicate), kind, value, datatype)

    @staticmethod
    def _decode(row: Sequence[str]) -> Statement:
        subject, predicate, kind, value, datatype = row
        if kind == "literal":
            obj: Term = Literal.from_lexical(value, datatype or None)
        else:
            obj = URIRef(value)
        return Statement(URIRef(subject), URIRef(predicate), obj)
