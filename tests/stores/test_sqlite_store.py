from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from tripleorm.errors import StoreConfigurationError, StoreConnectionError, StoreTransactionError
from tripleorm.rdf import Graph, Literal, Namespace
from tripleorm.stores import SQLiteStore, StoreConfig, SupportsNamedGraphs, SupportsTransactions

EX = Namespace("http://example.org/sqlite/")


@pytest.fixture
def store(tmp_path):
    store = SQLiteStore(f"sqlite:///{tmp_path / 'graph.db'}")
    store.connect()
    yield store
    store.disconnect()


def test_capabilities():
    store = SQLiteStore()
    assert isinstance(store, SupportsTransactions)
    assert isinstance(store, SupportsNamedGraphs)
    with pytest.raises(StoreConnectionError):
        list(store.triples())


def test_statements_survive_reconnect(tmp_path):
    dsn = f"sqlite:///{tmp_path / 'durable.db'}"
    graph = Graph()
    graph.add(EX.a, EX.name, "Alpha")
    graph.add(EX.a, EX.link, EX.b)

    first = SQLiteStore(dsn)
    first.connect()
    first.add(graph)
    first.disconnect()

    second = SQLiteStore(dsn)
    second.connect()
    assert Graph(second.triples(EX.a)) == graph
    second.disconnect()


def test_literal_datatypes_round_trip(store):
    values = [
        "text with \"quotes\"",
        42,
        Decimal("3.10"),
        2.5,
        True,
        date(2024, 2, 29),
        datetime(2024, 2, 29, 8, 15, tzinfo=timezone.utc),
    ]
    graph = Graph()
    for value in values:
        graph.add(EX.values, EX.value, value)
    store.add(graph)

    restored = {statement.object for statement in store.triples(EX.values)}

    assert restored == {Literal.from_python(value) for value in values}


def test_match_by_literal_and_uri(store):
    graph = Graph()
    graph.add(EX.a, EX.age, 30)
    graph.add(EX.b, EX.age, "30")
    graph.add(EX.c, EX.link, EX.a)
    store.add(graph)

    assert [s.subject for s in store.triples(None, EX.age, Literal.from_python(30))] == [EX.a]
    assert [s.subject for s in store.triples(None, None, EX.a)] == [EX.c]


def test_remove_only_touches_named_graph(store):
    graph = Graph()
    graph.add(EX.a, EX.p, "x")
    store.add(graph)
    store.add_to_graph(EX.g, graph)

    assert store.graph_ids() == [EX.g]
    assert len(store) == 2
    assert len(list(store.triples(EX.a))) == 1

    store.remove_from_graph(EX.g, graph)

    assert store.graph_ids() == []
    assert store.graph() == graph


def test_transaction_commit_and_rollback(store):
    kept = Graph()
    kept.add(EX.kept, EX.p, 1)
    dropped = Graph()
    dropped.add(EX.dropped, EX.p, 2)

    store.begin()
    assert store.in_transaction
    store.add(kept)
    store.commit()

    store.begin()
    store.add(dropped)
    store.rollback()

    assert not store.in_transaction
    assert [s.subject for s in store.triples()] == [EX.kept]


def test_commit_without_transaction_fails(store):
    with pytest.raises(StoreTransactionError):
        store.commit()


def test_journal_mode_option(tmp_path):
    store = SQLiteStore(f"sqlite:///{tmp_path / 'wal.db'}?journal_mode=wal")
    store.connect()
    mode = store._ensure_connection().execute("PRAGMA journal_mode").fetchone()[0]
    assert mode == "wal"
    store.disconnect()


def test_invalid_journal_mode_rejected():
    store = SQLiteStore("sqlite:///:memory:?journal_mode=wal;drop")
    with pytest.raises(StoreConfigurationError):
        store.connect()


def test_wrong_driver_rejected():
    store = SQLiteStore(StoreConfig.from_dsn("memory://"))
    with pytest.raises(StoreConfigurationError):
        store.connect()
