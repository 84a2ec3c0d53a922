import gc

from tripleorm.core import Entity, StringField
from tripleorm.hooks import HookDispatcher, LifecycleEvent, post_persist, pre_persist
from tripleorm.persistence import ListenerCache, Session
from tripleorm.rdf import Namespace
from tripleorm.stores import MemoryStore

EX = Namespace("http://example.org/listeners/")


class CountingListener:
    created = 0

    def __init__(self):
        CountingListener.created += 1
        self.seen = []

    @pre_persist
    def before(self, entity):
        self.seen.append(("pre", entity.label))

    @post_persist
    def after(self, entity):
        self.seen.append(("post", entity.label))


class Badge(Entity):
    label = StringField()

    class Meta:
        rdf_type = EX.Badge
        namespace = "http://example.org/listeners/"
        listeners = (CountingListener,)


def test_listeners_are_cached_per_instance():
    cache = ListenerCache()
    badge = Badge(label="a")

    first = cache.listeners_for(badge, (CountingListener,))
    second = cache.listeners_for(badge, (CountingListener,))

    assert first is second
    assert badge in cache
    assert Badge(label="b") not in cache


def test_cache_does_not_keep_entities_alive():
    cache = ListenerCache()
    badge = Badge(label="temporary")
    cache.listeners_for(badge, (CountingListener,))
    assert len(cache) == 1

    del badge
    gc.collect()

    assert len(cache) == 0


def test_factory_failure_is_reported_and_skipped():
    failures = []

    def factory(listener_type):
        raise RuntimeError("cannot build")

    cache = ListenerCache(factory)
    listeners = cache.listeners_for(
        Badge(label="x"),
        (CountingListener,),
        on_failure=lambda listener_type, exc: failures.append((listener_type, str(exc))),
    )

    assert listeners == []
    assert failures == [(CountingListener, "cannot build")]


def test_session_reuses_listener_set_until_cleared():
    built = []

    def factory(listener_type):
        listener = listener_type()
        built.append(listener)
        return listener

    session = Session(MemoryStore(), listener_factory=factory, hooks=HookDispatcher())
    badge = Badge(EX.badge1, label="gold")

    session.persist(badge)

    assert len(built) == 1
    assert built[0].seen == [("pre", "gold"), ("post", "gold")]

    session.clear()
    assert len(session.listeners) == 0
    session.remove(badge)
    assert len(built) == 2
    session.close()


def test_listener_instantiation_failure_goes_to_error_callback():
    errors = []

    def factory(listener_type):
        raise RuntimeError("no listener today")

    session = Session(
        MemoryStore(),
        listener_factory=factory,
        hooks=HookDispatcher(),
        on_lifecycle_error=lambda event, entity, exc: errors.append(event),
    )
    badge = Badge(EX.badge2, label="silver")

    session.persist(badge)

    assert session.contains(badge)
    assert errors == [LifecycleEvent.PRE_PERSIST]
    session.close()
