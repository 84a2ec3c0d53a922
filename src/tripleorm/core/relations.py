"""
Relationship fields, cascade directives and the entity registry.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple, Type, cast

from ..errors import ModelConfigurationError
from ..rdf import Term, URIRef
from .fields import Field

if TYPE_CHECKING:
    from .entity import Entity


class CascadeType(str, Enum):
    PERSIST = "persist"
    MERGE = "merge"
    REMOVE = "remove"
    ALL = "all"

    @classmethod
    def expand(cls, values: Iterable["CascadeType | str"]) -> frozenset["CascadeType"]:
        kinds = set()
        for value in values:
            kind = cls(value)
            if kind is cls.ALL:
                kinds.update({cls.PERSIST, cls.MERGE, cls.REMOVE})
            else:
                kinds.add(kind)
        return frozenset(kinds)


class Relation(Field):
    """
    Field referencing other entities by identity.

    ``cascade`` lists the operations propagated from the owner to the
    referenced entities.
    """

    def __init__(
        self,
        to: Type | str,
        predicate: Optional[str] = None,
        *,
        many: bool = False,
        cascade: Iterable[CascadeType | str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(predicate, many=many, **kwargs)
        self.to = to
        self.cascade = CascadeType.expand(cascade)
        self.remote_model: Optional[Type["Entity"]] = to if isinstance(to, type) else None

    def resolve_model(self, model: Type["Entity"]) -> None:
        self.remote_model = model

    def require_remote_model(self) -> Type["Entity"]:
        if self.remote_model is None:
            raise ModelConfigurationError(
                f"Relation '{self.name}' on '{getattr(self.model, '__name__', '?')}' targets "
                f"unknown entity '{self.to}'"
            )
        return self.remote_model

    def to_python(self, value: Any) -> Any:
        if value is None:
            return value
        meta = getattr(type(value), "_meta", None)
        if meta is None:
            raise ValueError(f"Relation '{self.name}' expects an entity, received {value!r}")
        return value

    def to_term(self, value: Any) -> Term:
        rdf_id = getattr(value, "rdf_id", None)
        if rdf_id is None:
            raise ValueError(f"Related {type(value).__name__} referenced by '{self.name}' has no identity")
        return URIRef(rdf_id)


class EntityRegistry:
    """
    Tracks declared entity classes and resolves relation targets by name.
    """

    def __init__(self) -> None:
        self.models: Dict[str, Type["Entity"]] = {}
        self.by_name: Dict[str, Type["Entity"]] = {}
        self.pending_fields: List[Tuple[Type["Entity"], Relation]] = []

    def register_model(self, model: Type["Entity"]) -> None:
        self.models[self._label(model)] = model
        self.by_name[model.__name__] = model
        self._resolve_pending()

    def register_field(self, model: Type["Entity"], field: Relation) -> None:
        target = self._resolve_target(field.to)
        if target is None:
            self.pending_fields.append((model, field))
            return
        field.resolve_model(target)

    def persistable_types(self) -> list[Type["Entity"]]:
        return [model for model in self.models.values() if not model._meta.abstract]

    def get(self, name: str) -> Optional[Type["Entity"]]:
        return self.models.get(name) or self.by_name.get(name.split(".")[-1])

    def _resolve_pending(self) -> None:
        unresolved = []
        for model, field in self.pending_fields:
            target = self._resolve_target(field.to)
            if target is None:
                unresolved.append((model, field))
                continue
            field.resolve_model(target)
        self.pending_fields = unresolved

    def _resolve_target(self, target: Type | str) -> Optional[Type["Entity"]]:
        if isinstance(target, type):
            return cast(Type["Entity"], target)
        return self.get(target)

    @staticmethod
    def _label(model: type) -> str:
        return f"{model.__module__}.{model.__qualname__}"


entity_registry = EntityRegistry()
