"""
Propagation of persistence operations along cascading relations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Set

from ..core.relations import CascadeType

if TYPE_CHECKING:
    from .session import Session

_CONTAINERS = (list, tuple, set, frozenset)


def cascade(session: "Session", entity: Any, kind: CascadeType, visited: Set[int]) -> None:
    """
    Apply ``kind`` to every entity reachable through relations cascading it.

    PERSIST and MERGE merge targets already in the store and persist the
    rest; REMOVE only removes targets that exist. ``visited`` holds the
    ``id()`` of every instance handled by the current top-level call and is
    shared with the nested operations, so cycles terminate.
    """
    metadata = session.metadata
    directives = metadata.cascade_directives(type(entity))
    for name, kinds in directives.items():
        if kind not in kinds:
            continue
        for target in _targets(getattr(entity, name, None)):
            if id(target) in visited or not metadata.is_persistable_type(type(target)):
                continue
            if kind is CascadeType.REMOVE:
                if session.contains(target):
                    session._remove(target, visited)
            elif session.contains(target):
                session._merge(target, visited)
            else:
                session._persist(target, visited)


def _targets(value: Any) -> Iterator[Any]:
    if value is None:
        return
    if isinstance(value, _CONTAINERS):
        for item in value:
            if item is not None:
                yield item
    else:
        yield value


__all__ = ["CascadeType", "cascade"]
