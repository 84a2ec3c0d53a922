"""
Entity base class and the per-class descriptor built at declaration time.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple, Type

from ..errors import ModelConfigurationError
from ..hooks.events import LifecycleEvent, find_marked_methods
from ..query.named import NamedQuery
from ..rdf import URIRef, is_valid_iri
from .fields import Field, IdentityField
from .relations import CascadeType, Relation, entity_registry

DEFAULT_NAMESPACE = "urn:tripleorm:"


@dataclass
class EntityOptions:
    """
    Static capability descriptor for an entity class, filled in by :class:`EntityMeta`.
    """

    model: Type["Entity"]
    rdf_type: Optional[URIRef] = None
    namespace: str = DEFAULT_NAMESPACE
    abstract: bool = False
    named_graph: Optional[URIRef] = None
    named_graph_per_instance: bool = False
    fields: "OrderedDict[str, Field]" = field(default_factory=OrderedDict)
    relations: "OrderedDict[str, Relation]" = field(default_factory=OrderedDict)
    listeners: Tuple[type, ...] = ()
    named_queries: Tuple[NamedQuery, ...] = ()
    lifecycle_methods: Dict[LifecycleEvent, str] = field(default_factory=dict)

    def add_field(self, field_obj: Field) -> None:
        name = field_obj.require_name()
        if name in self.fields or name in self.relations:
            raise ModelConfigurationError(
                f"Duplicate field name '{name}' on entity '{self.model.__name__}'"
            )
        if isinstance(field_obj, Relation):
            self.relations[name] = field_obj
        else:
            self.fields[name] = field_obj

    def get_field(self, name: str) -> Field:
        try:
            return self.fields.get(name) or self.relations[name]
        except KeyError as exc:
            raise KeyError(f"Unknown field '{name}' on entity '{self.model.__name__}'") from exc

    def get_fields(self) -> Iterable[Field]:
        return list(self.fields.values()) + list(self.relations.values())

    def cascade_directives(self) -> Dict[str, frozenset[CascadeType]]:
        return {name: relation.cascade for name, relation in self.relations.items() if relation.cascade}


class EntityMeta(type):
    """
    Metaclass collecting fields, relations and lifecycle callbacks.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "EntityMeta":
        if not bases:
            return super().__new__(mcls, name, bases, attrs)

        declared_fields: Dict[str, Field] = {}
        for attr_name, value in list(attrs.items()):
            if isinstance(value, Field):
                declared_fields[attr_name] = attrs.pop(attr_name)

        cls = super().__new__(mcls, name, bases, attrs)

        parent_meta: Optional[EntityOptions] = next(
            (base._meta for base in bases if isinstance(getattr(base, "_meta", None), EntityOptions)), None
        )
        meta = attrs.get("Meta")
        options = EntityOptions(model=cls)
        if parent_meta is not None:
            options.namespace = parent_meta.namespace
            options.rdf_type = parent_meta.rdf_type
            options.named_graph = parent_meta.named_graph
            options.named_graph_per_instance = parent_meta.named_graph_per_instance
            options.listeners = parent_meta.listeners
        if meta:
            options.namespace = getattr(meta, "namespace", options.namespace)
            rdf_type = getattr(meta, "rdf_type", options.rdf_type)
            options.rdf_type = URIRef(rdf_type) if rdf_type else None
            options.abstract = getattr(meta, "abstract", False)
            named_graph = getattr(meta, "named_graph", options.named_graph)
            options.named_graph = URIRef(named_graph) if named_graph else None
            options.named_graph_per_instance = getattr(
                meta, "named_graph_per_instance", options.named_graph_per_instance
            )
            options.listeners = tuple(getattr(meta, "listeners", options.listeners))
            options.named_queries = tuple(getattr(meta, "named_queries", ()))

        mcls._check_iri(cls, "rdf_type", options.rdf_type)
        mcls._check_iri(cls, "named_graph", options.named_graph)
        cls._meta = options

        if parent_meta is not None:
            for inherited in parent_meta.get_fields():
                options.add_field(inherited)

        sorted_fields = sorted(declared_fields.items(), key=lambda item: item[1].creation_counter)
        for attr_name, field_obj in sorted_fields:
            if isinstance(field_obj, Relation) and field_obj.to == "self":
                field_obj.to = cls
                field_obj.resolve_model(cls)
            field_obj.contribute_to_class(cls, attr_name, options.namespace)
            options.add_field(field_obj)
            if isinstance(field_obj, Relation):
                entity_registry.register_field(cls, field_obj)

        try:
            options.lifecycle_methods = find_marked_methods(cls)
        except ValueError as exc:
            raise ModelConfigurationError(str(exc)) from exc

        entity_registry.register_model(cls)
        return cls

    @staticmethod
    def _check_iri(cls: type, option: str, value: Optional[str]) -> None:
        if value is not None and not is_valid_iri(value):
            raise ModelConfigurationError(f"Meta.{option} of '{cls.__name__}' is not an absolute IRI: {value!r}")


class Entity(metaclass=EntityMeta):
    """
    Base class for persistable objects identified by an IRI.
    """

    rdf_id = IdentityField()

    def __init__(self, rdf_id: Optional[str] = None, **kwargs: Any) -> None:
        self._field_values: Dict[str, Any] = {}
        if rdf_id is not None:
            self.rdf_id = rdf_id

        for name in kwargs:
            if name not in self._meta.fields and name not in self._meta.relations:
                raise TypeError(f"{type(self).__name__}() got an unexpected keyword argument '{name}'")
        for field_obj in self._meta.get_fields():
            name = field_obj.require_name()
            if name in kwargs:
                setattr(self, name, kwargs[name])

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.rdf_id or 'unsaved'}>"

    def to_dict(self) -> Dict[str, Any]:
        """
        Field values keyed by name; related entities are reduced to their identities.
        """
        data: Dict[str, Any] = {"rdf_id": self.rdf_id}
        for name in self._meta.fields:
            value = getattr(self, name)
            data[name] = list(value) if isinstance(value, list) else value
        for name in self._meta.relations:
            value = getattr(self, name)
            if isinstance(value, list):
                data[name] = [getattr(item, "rdf_id", None) for item in value]
            else:
                data[name] = getattr(value, "rdf_id", None)
        return data

    @classmethod
    def _blank(cls) -> "Entity":
        """
        Instance with empty state, bypassing ``__init__`` for reconstruction.
        """
        instance = cls.__new__(cls)
        instance._field_values = {}
        return instance
