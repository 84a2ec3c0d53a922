"""
Object to graph mapping.
"""

from .mapper import Mapper, RdfMapper, as_identity

__all__ = ["Mapper", "RdfMapper", "as_identity"]
