"""
Ordered checks run before a session touches the store.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, runtime_checkable

from ..errors import (
    MissingIdentityError,
    MissingRdfClassError,
    NotPersistableError,
    NullEntityError,
    ValidationError,
)
from ..metadata import MetadataProvider


@runtime_checkable
class SupportsRdfId(Protocol):
    rdf_id: Any


def validate_entity(entity: Any, metadata: MetadataProvider) -> None:
    """
    Reject ``entity`` unless it can be addressed in the store.

    Checks run in a fixed order so the first failing capability decides the
    error: null, persistable type, RDF class, identity capability.
    """
    if entity is None:
        raise NullEntityError("Cannot operate on a null entity.")

    entity_type = type(entity)
    if not metadata.is_persistable_type(entity_type):
        raise NotPersistableError(f"'{entity_type.__name__}' is not a persistable entity type.")

    if metadata.rdf_class(entity_type) is None:
        raise MissingRdfClassError(f"'{entity_type.__name__}' does not declare an rdf_type.")

    if not isinstance(entity, SupportsRdfId):
        raise MissingIdentityError(f"'{entity_type.__name__}' does not expose an rdf_id.")


def validate_fields(entity: Any) -> None:
    """
    Check required fields of a declared entity before it is written.
    """
    errors: Dict[str, List[str]] = {}
    for field_obj in entity._meta.get_fields():
        if field_obj.nullable:
            continue
        name = field_obj.require_name()
        value = getattr(entity, name, None)
        if value is None or (field_obj.many and not value):
            errors.setdefault(name, []).append("This field cannot be null.")

    if errors:
        details = "; ".join(f"{name}: {', '.join(messages)}" for name, messages in errors.items())
        raise ValidationError(f"{type(entity).__name__} is invalid ({details})")
