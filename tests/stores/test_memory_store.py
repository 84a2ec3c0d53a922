import pytest

from tripleorm.errors import StoreConnectionError
from tripleorm.rdf import Graph, Literal, Namespace
from tripleorm.stores import GraphStore, MemoryStore, SupportsNamedGraphs, SupportsTransactions

EX = Namespace("http://example.org/memory/")


def make_graph(*statements):
    graph = Graph()
    for statement in statements:
        graph.add(*statement)
    return graph


@pytest.fixture
def store():
    store = MemoryStore()
    store.connect()
    yield store
    store.disconnect()


def test_protocols():
    store = MemoryStore()
    assert isinstance(store, GraphStore)
    assert isinstance(store, SupportsNamedGraphs)
    assert not isinstance(store, SupportsTransactions)


def test_requires_connection():
    store = MemoryStore()
    with pytest.raises(StoreConnectionError):
        store.add(make_graph((EX.a, EX.p, "x")))
    store.connect()
    store.connect()
    assert store.is_connected


def test_add_match_and_remove(store):
    store.add(make_graph((EX.a, EX.p, "x"), (EX.a, EX.q, EX.b), (EX.b, EX.p, "y")))

    assert len(list(store.triples(EX.a))) == 2
    assert {s.subject for s in store.triples(None, EX.p, Literal("y"))} == {EX.b}

    store.remove(make_graph((EX.a, EX.p, "x")))

    assert len(store) == 2
    assert [s.object for s in store.triples(EX.a)] == [EX.b]


def test_adding_twice_keeps_one_statement(store):
    graph = make_graph((EX.a, EX.p, 1))
    store.add(graph)
    store.add(graph)
    assert len(store) == 1


def test_named_graphs_are_visible_to_reads(store):
    store.add_to_graph(EX.g1, make_graph((EX.a, EX.p, "in g1")))
    store.add(make_graph((EX.a, EX.p, "in default")))

    assert list(store.graph_ids()) == [EX.g1]
    assert len(list(store.triples(EX.a))) == 2
    assert len(store.graph(EX.g1)) == 1

    store.remove_from_graph(EX.g1, make_graph((EX.a, EX.p, "in g1")))

    assert list(store.graph_ids()) == []
    store.remove_from_graph(EX.unknown, make_graph((EX.a, EX.p, "x")))


def test_same_statement_in_two_graphs_read_once(store):
    graph = make_graph((EX.a, EX.p, "shared"))
    store.add(graph)
    store.add_to_graph(EX.g2, graph)

    assert len(list(store.triples(EX.a))) == 1
    assert len(store) == 2


def test_seeded_graph():
    store = MemoryStore(make_graph((EX.a, EX.p, "seed")))
    store.connect()
    assert store.graph() == make_graph((EX.a, EX.p, "seed"))
