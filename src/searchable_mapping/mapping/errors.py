"""Errors raised while declaring or projecting search mappings."""

from __future__ import annotations


class MappingError(Exception):
    """Base error for the mapping package."""


class ConfigurationError(MappingError, ValueError):
    """Raised when a field or builder is declared with invalid options."""


class AttributeResolutionError(MappingError, AttributeError):
    """Raised when an instance lacks the attribute or accessor a field reads from."""

    def __init__(self, field_name: str, attribute: str, entity_type: str) -> None:
        self.field_name = field_name
        self.attribute = attribute
        self.entity_type = entity_type
        if attribute == field_name:
            msg = f"{entity_type} has no attribute '{attribute}' for field '{field_name}'"
        else:
            msg = f"{entity_type} has no accessor '{attribute}' for field '{field_name}'"
        super().__init__(msg)
