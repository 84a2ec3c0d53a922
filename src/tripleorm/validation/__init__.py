"""
Validation utilities exposed at the package level.
"""

from ..errors import ValidationError
from .pipeline import SupportsRdfId, validate_entity, validate_fields

__all__ = ["SupportsRdfId", "ValidationError", "validate_entity", "validate_fields"]
