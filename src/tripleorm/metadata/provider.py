"""
Metadata provider answering capability questions about entity types.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Type

from ..core.entity import EntityOptions
from ..core.relations import CascadeType, EntityRegistry, entity_registry
from ..errors import ModelConfigurationError
from ..hooks.events import LifecycleEvent, find_marked_methods
from ..query.named import NamedQuery
from ..rdf import URIRef


class MetadataProvider(Protocol):
    def is_persistable_type(self, entity_type: type) -> bool: ...

    def rdf_class(self, entity_type: type) -> Optional[URIRef]: ...

    def cascade_directives(self, entity_type: type) -> Mapping[str, frozenset[CascadeType]]: ...

    def listener_types(self, entity_type: type) -> Tuple[type, ...]: ...

    def named_queries_declared_on(self, entity_type: type) -> Tuple[NamedQuery, ...]: ...

    def persistable_types(self) -> List[type]: ...

    def lifecycle_method(self, owner_type: type, event: LifecycleEvent) -> Optional[str]: ...

    def named_graph(self, entity: Any) -> Optional[URIRef]: ...

    def mapped_attributes(self, entity_type: type) -> List[str]: ...


class RegistryMetadataProvider:
    """
    Reads the descriptors that :class:`~tripleorm.core.entity.EntityMeta`
    registers for every declared entity class.
    """

    def __init__(self, registry: EntityRegistry | None = None) -> None:
        self.registry = registry or entity_registry
        self._listener_methods: Dict[type, Dict[LifecycleEvent, str]] = {}

    @staticmethod
    def options(entity_type: type) -> Optional[EntityOptions]:
        meta = getattr(entity_type, "_meta", None)
        if isinstance(meta, EntityOptions) and meta.model is entity_type:
            return meta
        return None

    def is_persistable_type(self, entity_type: type) -> bool:
        options = self.options(entity_type)
        return options is not None and not options.abstract

    def rdf_class(self, entity_type: type) -> Optional[URIRef]:
        options = self.options(entity_type)
        return options.rdf_type if options else None

    def cascade_directives(self, entity_type: type) -> Mapping[str, frozenset[CascadeType]]:
        options = self.options(entity_type)
        return options.cascade_directives() if options else {}

    def listener_types(self, entity_type: type) -> Tuple[type, ...]:
        options = self.options(entity_type)
        # dict.fromkeys keeps declaration order while dropping repeats
        return tuple(dict.fromkeys(options.listeners)) if options else ()

    def named_queries_declared_on(self, entity_type: type) -> Tuple[NamedQuery, ...]:
        options = self.options(entity_type)
        return options.named_queries if options else ()

    def persistable_types(self) -> List[type]:
        return list(self.registry.persistable_types())

    def lifecycle_method(self, owner_type: type, event: LifecycleEvent) -> Optional[str]:
        options = self.options(owner_type)
        if options is not None:
            return options.lifecycle_methods.get(event)
        methods = self._listener_methods.get(owner_type)
        if methods is None:
            try:
                methods = find_marked_methods(owner_type)
            except ValueError as exc:
                raise ModelConfigurationError(str(exc)) from exc
            self._listener_methods[owner_type] = methods
        return methods.get(event)

    def named_graph(self, entity: Any) -> Optional[URIRef]:
        options = self.options(type(entity))
        if options is None:
            return None
        if options.named_graph_per_instance:
            rdf_id = getattr(entity, "rdf_id", None)
            return URIRef(rdf_id) if rdf_id else None
        return options.named_graph

    def mapped_attributes(self, entity_type: type) -> List[str]:
        options = self.options(entity_type)
        if options is None:
            return []
        return list(options.fields) + list(options.relations)

    def entity_options(self, entity_type: Type[Any]) -> EntityOptions:
        options = self.options(entity_type)
        if options is None:
            raise ModelConfigurationError(f"'{entity_type.__name__}' is not a declared entity")
        return options
