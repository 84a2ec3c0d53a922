"""
Lifecycle hooks for TripleORM entities.
"""

from .dispatcher import HookDispatcher, HookHandler, LifecycleErrorCallback, hooks
from .events import (
    LifecycleEvent,
    find_marked_methods,
    marked_events,
    post_load,
    post_persist,
    post_remove,
    post_update,
    pre_persist,
    pre_remove,
    pre_update,
)

__all__ = [
    "HookDispatcher",
    "HookHandler",
    "LifecycleErrorCallback",
    "LifecycleEvent",
    "find_marked_methods",
    "hooks",
    "marked_events",
    "post_load",
    "post_persist",
    "post_remove",
    "post_update",
    "pre_persist",
    "pre_remove",
    "pre_update",
]
