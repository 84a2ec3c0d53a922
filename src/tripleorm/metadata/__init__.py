"""
Entity capability metadata.
"""

from .provider import MetadataProvider, RegistryMetadataProvider

__all__ = ["MetadataProvider", "RegistryMetadataProvider"]
