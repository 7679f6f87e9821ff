"""
Declarative search mapping package.

- schema: Field types, resolution strategies and field descriptors
- builder: Per-entity registration, schema derivation and document projection
- errors: Configuration and attribute-resolution errors
"""

from searchable_mapping.mapping.builder import MappingBuilder, document_type_for
from searchable_mapping.mapping.errors import AttributeResolutionError, ConfigurationError, MappingError
from searchable_mapping.mapping.schema import (
    AccessorResolution,
    ComputedResolution,
    DirectResolution,
    FieldDescriptor,
    FieldType,
    Resolution,
)


__all__ = [
    "AccessorResolution",
    "AttributeResolutionError",
    "ComputedResolution",
    "ConfigurationError",
    "DirectResolution",
    "FieldDescriptor",
    "FieldType",
    "MappingBuilder",
    "MappingError",
    "Resolution",
    "document_type_for",
]
