"""
Lifecycle event kinds and the decorators marking callback methods.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, TypeVar

F = TypeVar("F", bound=Callable[..., object])

LIFECYCLE_ATTR = "__tripleorm_lifecycle__"


class LifecycleEvent(str, Enum):
    PRE_PERSIST = "pre_persist"
    POST_PERSIST = "post_persist"
    PRE_UPDATE = "pre_update"
    POST_UPDATE = "post_update"
    PRE_REMOVE = "pre_remove"
    POST_REMOVE = "post_remove"
    POST_LOAD = "post_load"


def _marker(event: LifecycleEvent) -> Callable[[F], F]:
    def decorate(func: F) -> F:
        events = set(getattr(func, LIFECYCLE_ATTR, ()))
        events.add(event)
        setattr(func, LIFECYCLE_ATTR, frozenset(events))
        return func

    decorate.__name__ = event.value
    return decorate


pre_persist = _marker(LifecycleEvent.PRE_PERSIST)
post_persist = _marker(LifecycleEvent.POST_PERSIST)
pre_update = _marker(LifecycleEvent.PRE_UPDATE)
post_update = _marker(LifecycleEvent.POST_UPDATE)
pre_remove = _marker(LifecycleEvent.PRE_REMOVE)
post_remove = _marker(LifecycleEvent.POST_REMOVE)
post_load = _marker(LifecycleEvent.POST_LOAD)


def marked_events(obj: object) -> frozenset[LifecycleEvent]:
    return getattr(obj, LIFECYCLE_ATTR, frozenset())


def find_marked_methods(cls: type) -> dict[LifecycleEvent, str]:
    """
    Map each event to the single method name marked for it on ``cls``.

    Raises ``ValueError`` when two differently named methods claim one event.
    """
    found: dict[LifecycleEvent, str] = {}
    for name in dir(cls):
        if name.startswith("__"):
            continue
        attr = getattr(cls, name, None)
        if not callable(attr):
            continue
        for event in marked_events(attr):
            existing = found.get(event)
            if existing is not None and existing != name:
                raise ValueError(
                    f"'{cls.__name__}' marks both '{existing}' and '{name}' as {event.value} callbacks"
                )
            found[event] = name
    return found
