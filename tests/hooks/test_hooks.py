import logging

import pytest

from tripleorm.core import Entity, ModelConfigurationError, StringField
from tripleorm.hooks import (
    HookDispatcher,
    LifecycleEvent,
    find_marked_methods,
    hooks,
    post_remove,
    post_update,
    pre_persist,
    pre_remove,
    pre_update,
)
from tripleorm.metadata import RegistryMetadataProvider
from tripleorm.persistence import Session
from tripleorm.rdf import Namespace
from tripleorm.stores import MemoryStore

EX = Namespace("http://example.org/hooks/")

events = []


@pytest.fixture(autouse=True)
def clear_hooks():
    hooks.clear()
    events.clear()
    yield
    hooks.clear()


class RecordingListener:
    @pre_persist
    def on_pre_persist(self, entity):
        events.append(("listener", "pre_persist", entity.name))

    @pre_update
    def on_pre_update(self, entity):
        events.append(("listener", "pre_update", entity.name))

    @post_remove
    def on_post_remove(self, entity):
        events.append(("listener", "post_remove", entity.name))


class BrokenListener:
    @pre_persist
    def fail(self, entity):
        raise RuntimeError("listener broke")


class Sample(Entity):
    name = StringField()

    class Meta:
        rdf_type = EX.Sample
        namespace = "http://example.org/hooks/"
        listeners = (RecordingListener,)

    @pre_persist
    def own_pre_persist(self):
        events.append(("entity", "pre_persist", self.name))

    @post_update
    def own_post_update(self):
        events.append(("entity", "post_update", self.name))

    @pre_remove
    def own_pre_remove(self):
        events.append(("entity", "pre_remove", self.name))


class Guarded(Entity):
    name = StringField()

    class Meta:
        rdf_type = EX.Guarded
        namespace = "http://example.org/hooks/"
        listeners = (BrokenListener, RecordingListener)


def make_session(**kwargs):
    return Session(MemoryStore(), **kwargs)


def test_hooks_fire_in_order():
    hooks.register(LifecycleEvent.PRE_PERSIST, lambda entity: events.append(("global", "pre_persist", entity.name)))
    hooks.register(
        "pre_persist",
        lambda entity: events.append(("typed", "pre_persist", entity.name)),
        entity_type=Sample,
    )

    session = make_session()
    session.persist(Sample(EX.alice, name="Alice"))

    assert events == [
        ("entity", "pre_persist", "Alice"),
        ("listener", "pre_persist", "Alice"),
        ("global", "pre_persist", "Alice"),
        ("typed", "pre_persist", "Alice"),
    ]
    session.close()


def test_update_and_remove_events():
    session = make_session()
    sample = Sample(EX.bob, name="Bob")
    session.persist(sample)
    events.clear()

    session.merge(sample)
    session.remove(sample)

    assert events == [
        ("listener", "pre_update", "Bob"),
        ("entity", "post_update", "Bob"),
        ("entity", "pre_remove", "Bob"),
        ("listener", "post_remove", "Bob"),
    ]
    session.close()


def test_failing_listener_does_not_stop_others_or_operation(caplog):
    reported = []
    session = make_session(on_lifecycle_error=lambda event, entity, exc: reported.append((event, str(exc))))
    guarded = Guarded(EX.guarded, name="Guarded")

    with caplog.at_level(logging.ERROR, logger="tripleorm.hooks"):
        session.persist(guarded)

    assert session.contains(guarded)
    assert reported == [(LifecycleEvent.PRE_PERSIST, "listener broke")]
    assert ("listener", "pre_persist", "Guarded") in events
    assert any(record.levelno == logging.ERROR for record in caplog.records)
    session.close()


def test_failing_handler_without_callback_is_only_logged(caplog):
    def explode(entity):
        raise ValueError("handler broke")

    hooks.register(LifecycleEvent.POST_PERSIST, explode)
    session = make_session()

    with caplog.at_level(logging.ERROR, logger="tripleorm.hooks"):
        session.persist(Sample(EX.carol, name="Carol"))

    assert any("post_persist callback failed for Sample" in record.message for record in caplog.records)
    session.close()


def test_type_handlers_apply_to_subclasses():
    class Special(Sample):
        class Meta:
            rdf_type = EX.Special
            namespace = "http://example.org/hooks/"

    dispatcher = HookDispatcher()
    seen = []
    dispatcher.register(LifecycleEvent.POST_LOAD, seen.append, entity_type=Sample)
    special = Special(EX.special, name="Special")

    dispatcher.fire(LifecycleEvent.POST_LOAD, special, metadata=RegistryMetadataProvider())

    assert seen == [special]


def test_register_rejects_unknown_event():
    with pytest.raises(ValueError):
        hooks.register("after_commit", lambda entity: None)


def test_duplicate_event_methods_rejected():
    with pytest.raises(ModelConfigurationError):

        class Twice(Entity):
            class Meta:
                rdf_type = EX.Twice

            @pre_persist
            def first(self):
                pass

            @pre_persist
            def second(self):
                pass


def test_find_marked_methods_on_listener():
    assert find_marked_methods(RecordingListener) == {
        LifecycleEvent.PRE_PERSIST: "on_pre_persist",
        LifecycleEvent.PRE_UPDATE: "on_pre_update",
        LifecycleEvent.POST_REMOVE: "on_post_remove",
    }


class TwiceMarkedListener:
    @pre_persist
    def first(self, entity):
        events.append(("twice", "first", entity.name))

    @pre_persist
    def second(self, entity):
        events.append(("twice", "second", entity.name))


class Doubly(Entity):
    name = StringField()

    class Meta:
        rdf_type = EX.Doubly
        namespace = "http://example.org/hooks/"
        listeners = (TwiceMarkedListener, RecordingListener)


def test_misconfigured_listener_is_reported_not_raised(caplog):
    reported = []
    session = make_session(on_lifecycle_error=lambda event, entity, exc: reported.append((event, exc)))
    doubly = Doubly(EX.doubly, name="Doubly")

    with caplog.at_level(logging.ERROR, logger="tripleorm.hooks"):
        session.persist(doubly)

    assert session.contains(doubly)
    assert reported
    assert reported[0][0] is LifecycleEvent.PRE_PERSIST
    assert all(isinstance(exc, ModelConfigurationError) for _, exc in reported)
    assert ("listener", "pre_persist", "Doubly") in events
    assert not any(kind == "twice" for kind, _, _ in events)
    assert any("pre_persist callback failed for Doubly" in record.message for record in caplog.records)
    session.close()
