"""
Core building blocks for TripleORM entities and metadata handling.
"""

from ..errors import ModelConfigurationError
from .entity import DEFAULT_NAMESPACE, Entity, EntityMeta, EntityOptions
from .fields import (
    BooleanField,
    DateField,
    DateTimeField,
    DecimalField,
    Field,
    FloatField,
    IdentityField,
    IntegerField,
    StringField,
    URIField,
)
from .relations import CascadeType, EntityRegistry, Relation, entity_registry

__all__ = [
    "BooleanField",
    "CascadeType",
    "DEFAULT_NAMESPACE",
    "DateField",
    "DateTimeField",
    "DecimalField",
    "Entity",
    "EntityMeta",
    "EntityOptions",
    "EntityRegistry",
    "Field",
    "FloatField",
    "IdentityField",
    "IntegerField",
    "ModelConfigurationError",
    "Relation",
    "StringField",
    "URIField",
    "entity_registry",
]
