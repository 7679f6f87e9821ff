"""Declarative field mappings for search-engine indexing."""

from searchable_mapping.indexing import IndexingCallbacks, SearchEngineClient
from searchable_mapping.mapping import (
    AttributeResolutionError,
    ConfigurationError,
    FieldDescriptor,
    FieldType,
    MappingBuilder,
    MappingError,
)
from searchable_mapping.searchable import Searchable, search_mapping_for, searchable


__all__ = [
    "AttributeResolutionError",
    "ConfigurationError",
    "FieldDescriptor",
    "FieldType",
    "IndexingCallbacks",
    "MappingBuilder",
    "MappingError",
    "SearchEngineClient",
    "Searchable",
    "search_mapping_for",
    "searchable",
]
