"""
Hook dispatcher coordinating lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Type

from ..errors import ModelConfigurationError
from ..utils import get_logger
from .events import LifecycleEvent

if TYPE_CHECKING:
    from ..metadata import MetadataProvider


HookHandler = Callable[[Any], None]
LifecycleErrorCallback = Callable[[LifecycleEvent, Any, BaseException], None]


class HookDispatcher:
    """
    Delivers lifecycle events to the entity, its listeners and registered handlers.

    Delivery order is fixed: the entity's own marked method, then each
    listener's marked method, then global handlers, then per-type handlers.
    A failing callback is logged and reported; it never aborts the operation.
    """

    def __init__(self) -> None:
        self._global_handlers: Dict[LifecycleEvent, List[HookHandler]] = defaultdict(list)
        self._type_handlers: Dict[type, Dict[LifecycleEvent, List[HookHandler]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self.logger = get_logger("hooks")

    def register(
        self,
        event: LifecycleEvent | str,
        handler: HookHandler,
        *,
        entity_type: Optional[Type[Any]] = None,
    ) -> None:
        event = LifecycleEvent(event)
        if entity_type is not None:
            self._type_handlers[entity_type][event].append(handler)
        else:
            self._global_handlers[event].append(handler)

    def handlers_for(self, event: LifecycleEvent, entity_type: type) -> List[HookHandler]:
        handlers = list(self._global_handlers.get(event, []))
        for klass in entity_type.__mro__:
            handlers.extend(self._type_handlers.get(klass, {}).get(event, []))
        return handlers

    def fire(
        self,
        event: LifecycleEvent,
        entity: Any,
        *,
        metadata: "MetadataProvider",
        listeners: Iterable[Any] = (),
        on_error: Optional[LifecycleErrorCallback] = None,
    ) -> None:
        if entity is None:
            return
        method_name = metadata.lifecycle_method(type(entity), event)
        if method_name is not None:
            self._invoke(event, entity, getattr(entity, method_name), (), on_error)
        for listener in listeners:
            try:
                listener_method = metadata.lifecycle_method(type(listener), event)
            except ModelConfigurationError as exc:
                self.report(event, entity, exc, on_error)
                continue
            if listener_method is not None:
                self._invoke(event, entity, getattr(listener, listener_method), (entity,), on_error)
        for handler in self.handlers_for(event, type(entity)):
            self._invoke(event, entity, handler, (entity,), on_error)

    def report(
        self,
        event: LifecycleEvent,
        entity: Any,
        exc: Exception,
        on_error: Optional[LifecycleErrorCallback],
    ) -> None:
        self.logger.error(
            "%s callback failed for %s: %s",
            event.value,
            type(entity).__name__,
            exc,
            exc_info=exc,
        )
        if on_error is not None:
            on_error(event, entity, exc)

    def _invoke(
        self,
        event: LifecycleEvent,
        entity: Any,
        callback: Callable[..., Any],
        args: tuple,
        on_error: Optional[LifecycleErrorCallback],
    ) -> None:
        try:
            callback(*args)
        except Exception as exc:  # lifecycle callbacks never abort persistence
            self.report(event, entity, exc, on_error)

    def clear(self) -> None:
        self._global_handlers.clear()
        self._type_handlers.clear()


hooks = HookDispatcher()
