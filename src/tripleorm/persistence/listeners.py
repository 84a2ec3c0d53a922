"""
Per-entity cache of instantiated lifecycle listeners.
"""

from __future__ import annotations

import weakref
from typing import Any, Callable, Dict, List, Optional, Tuple

ListenerFactory = Callable[[type], Any]
ListenerFailure = Callable[[type, Exception], None]


def default_listener_factory(listener_type: type) -> Any:
    return listener_type()


class ListenerCache:
    """
    Maps live entity instances to their listener objects.

    Entries are keyed by ``id(entity)`` and guarded by a weak reference whose
    callback evicts the entry once the entity is garbage collected, so the
    cache never keeps an entity alive.
    """

    def __init__(self, factory: Optional[ListenerFactory] = None) -> None:
        self.factory = factory or default_listener_factory
        self._entries: Dict[int, Tuple[weakref.ref, List[Any]]] = {}

    def listeners_for(
        self,
        entity: Any,
        listener_types: Tuple[type, ...],
        *,
        on_failure: Optional[ListenerFailure] = None,
    ) -> List[Any]:
        key = id(entity)
        entry = self._entries.get(key)
        if entry is not None and entry[0]() is entity:
            return entry[1]

        listeners: List[Any] = []
        for listener_type in listener_types:
            try:
                listeners.append(self.factory(listener_type))
            except Exception as exc:
                if on_failure is None:
                    raise
                # reported, the listener is skipped
                on_failure(listener_type, exc)

        ref = weakref.ref(entity, self._evictor(key))
        self._entries[key] = (ref, listeners)
        return listeners

    def _evictor(self, key: int) -> Callable[[weakref.ref], None]:
        entries = self._entries

        def evict(ref: weakref.ref) -> None:
            entry = entries.get(key)
            if entry is not None and entry[0] is ref:
                del entries[key]

        return evict

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, entity: Any) -> bool:
        entry = self._entries.get(id(entity))
        return entry is not None and entry[0]() is entity

    def __len__(self) -> int:
        return len(self._entries)
