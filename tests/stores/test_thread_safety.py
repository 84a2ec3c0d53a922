import threading

from tripleorm.rdf import Graph, Namespace
from tripleorm.stores import MemoryStore

EX = Namespace("http://example.org/threads/")


def test_memory_store_thread_safety():
    store = MemoryStore()
    store.connect()
    errors: list[Exception] = []
    barrier = threading.Barrier(5)

    def worker(offset: int) -> None:
        try:
            barrier.wait()
            for idx in range(200):
                graph = Graph()
                graph.add(EX.term(f"s{offset}-{idx}"), EX.p, idx)
                store.add_to_graph(EX.term(f"g{offset}"), graph)
                list(store.triples(None, EX.p))
                store.remove_from_graph(EX.term(f"g{offset}"), graph)
        except Exception as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(store) == 0
    assert list(store.graph_ids()) == []
