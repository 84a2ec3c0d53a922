"""
Conversion between entity instances and graph statements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Protocol, Type

from ..core.entity import Entity, EntityOptions
from ..core.fields import Field
from ..errors import MappingError, ModelConfigurationError
from ..metadata import RegistryMetadataProvider
from ..rdf import RDF_TYPE, Graph, URIRef, is_valid_iri
from ..utils import coin_identifier, get_logger

if TYPE_CHECKING:
    from ..stores.base import GraphStore


class Mapper(Protocol):
    def to_graph(self, entity: Any) -> Graph: ...

    def from_graph(self, entity_type: type, key: Any, store: "GraphStore") -> Any: ...

    def describe(self, store: "GraphStore", entity: Any) -> Graph: ...


def as_identity(key: Any) -> URIRef:
    """
    Normalise a lookup key (IRI string or entity) to an identity IRI.
    """
    candidate = getattr(key, "rdf_id", key)
    if not is_valid_iri(candidate):
        raise MappingError(f"'{key}' is not a valid entity identity")
    return URIRef(candidate)


class RdfMapper:
    """
    Maps declared fields one-to-one onto predicates of the entity's IRI.

    Multi-valued fields come back sorted because a graph carries no order.
    """

    def __init__(self, metadata: RegistryMetadataProvider | None = None) -> None:
        self.metadata = metadata or RegistryMetadataProvider()
        self.logger = get_logger("mapping")

    # ------------------------------------------------------------------ #
    # Entity -> graph
    # ------------------------------------------------------------------ #
    def ensure_identity(self, entity: Any) -> URIRef:
        rdf_id = getattr(entity, "rdf_id", None)
        if rdf_id is None:
            options = self._options(type(entity))
            entity.rdf_id = coin_identifier(options.namespace, type(entity).__name__)
            self.logger.debug("Coined identity %s", entity.rdf_id)
        return URIRef(entity.rdf_id)

    def to_graph(self, entity: Any) -> Graph:
        options = self._options(type(entity))
        if options.rdf_type is None:
            raise MappingError(f"'{type(entity).__name__}' declares no rdf_type")
        subject = self.ensure_identity(entity)

        graph = Graph()
        graph.add(subject, RDF_TYPE, options.rdf_type)
        for field_obj in options.fields.values():
            self._add_values(graph, subject, field_obj, getattr(entity, field_obj.require_name()))
        for relation in options.relations.values():
            value = getattr(entity, relation.require_name())
            targets = value if relation.many else [value]
            for target in targets:
                if target is not None and getattr(target, "rdf_id", None) is None:
                    self.ensure_identity(target)
            self._add_values(graph, subject, relation, value)
        return graph

    def _add_values(self, graph: Graph, subject: URIRef, field_obj: Field, value: Any) -> None:
        values = value if field_obj.many else [value]
        for item in values:
            if item is None:
                continue
            try:
                term = field_obj.to_term(item)
            except (TypeError, ValueError) as exc:
                raise MappingError(
                    f"Cannot map value {item!r} of field '{field_obj.name}' on {getattr(field_obj.model, '__name__', '?')}"
                ) from exc
            graph.add(subject, field_obj.require_predicate(), term)

    # ------------------------------------------------------------------ #
    # Graph -> entity
    # ------------------------------------------------------------------ #
    def from_graph(self, entity_type: type, key: Any, store: "GraphStore") -> Any:
        return self._load(entity_type, as_identity(key), store, {})

    def _load(self, entity_type: type, identity: URIRef, store: "GraphStore", loaded: Dict[URIRef, Any]) -> Any:
        if identity in loaded:
            return loaded[identity]
        options = self._options(entity_type)
        if options.abstract:
            raise MappingError(f"'{entity_type.__name__}' is abstract and cannot be instantiated")

        statements = list(store.triples(identity, None, None))
        instance = options.model._blank()
        instance.rdf_id = identity
        loaded[identity] = instance

        for field_obj in options.fields.values():
            terms = [s.object for s in statements if s.predicate == field_obj.predicate]
            if not terms:
                continue
            try:
                values = [field_obj.from_term(term) for term in terms]
            except (TypeError, ValueError) as exc:
                raise MappingError(f"Invalid stored value for '{field_obj.name}' of {identity}") from exc
            self._assign(instance, field_obj, sorted(values, key=_sort_key))

        for relation in options.relations.values():
            targets = sorted(
                (s.object for s in statements if s.predicate == relation.predicate and isinstance(s.object, URIRef)),
                key=str,
            )
            if not targets:
                continue
            try:
                remote = relation.require_remote_model()
            except ModelConfigurationError as exc:
                raise MappingError(str(exc)) from exc
            related = [self._load(self._concrete_type(remote, target, store), target, store, loaded) for target in targets]
            self._assign(instance, relation, related)
        return instance

    @staticmethod
    def _assign(instance: Entity, field_obj: Field, values: List[Any]) -> None:
        name = field_obj.require_name()
        if field_obj.many:
            instance._field_values[name] = values
        else:
            instance._field_values[name] = values[0]

    def _concrete_type(self, declared: Type[Entity], identity: URIRef, store: "GraphStore") -> type:
        """
        Most specific registered subtype of ``declared`` whose rdf_type the resource carries.
        """
        rdf_types = {s.object for s in store.triples(identity, RDF_TYPE, None)}
        candidates = [
            entity_type
            for entity_type in self.metadata.persistable_types()
            if issubclass(entity_type, declared) and self.metadata.rdf_class(entity_type) in rdf_types
        ]
        if not candidates:
            return declared
        return max(candidates, key=lambda entity_type: len(entity_type.__mro__))

    # ------------------------------------------------------------------ #
    def describe(self, store: "GraphStore", entity: Any) -> Graph:
        identity = as_identity(entity)
        return Graph(store.triples(identity, None, None))

    def _options(self, entity_type: type) -> EntityOptions:
        try:
            return self.metadata.entity_options(entity_type)
        except ModelConfigurationError as exc:
            raise MappingError(str(exc)) from exc


def _sort_key(value: Any) -> tuple:
    return (type(value).__name__, str(value))

