"""
Field descriptors for search mappings.

A descriptor records one indexed field: its name, its storage type and the
rule used to read its value from an entity instance. Supported resolution
strategies:
- DirectResolution: read the attribute with the field's own name
- AccessorResolution: read (and call, if callable) another named accessor
- ComputedResolution: call a zero-argument function captured at declaration

Descriptors are immutable once created. The storage type values double as the
type tags published in the search-engine schema.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
import inspect
from types import MappingProxyType
from typing import Any

from searchable_mapping.mapping.errors import AttributeResolutionError, ConfigurationError


class FieldType(str, Enum):
    """Storage types supported in a mapping."""

    TEXT = "text"
    KEYWORD = "keyword"
    DATE = "date"
    LONG = "long"
    DOUBLE = "double"


class Resolution(ABC):
    """Strategy for obtaining a field value from an instance."""

    @property
    @abstractmethod
    def kind(self) -> str:
        """Return a short label for the strategy."""

    @abstractmethod
    def resolve(self, instance: Any, field_name: str) -> Any:
        """Return the value of ``field_name`` for ``instance``."""


_MISSING = object()


def _lookup(instance: Any, attribute: str, field_name: str) -> Any:
    try:
        return getattr(instance, attribute)
    except AttributeError as exc:
        # A property getter's own AttributeError propagates unchanged
        if inspect.getattr_static(instance, attribute, _MISSING) is not _MISSING:
            raise
        raise AttributeResolutionError(field_name, attribute, type(instance).__name__) from exc


@dataclass(frozen=True)
class DirectResolution(Resolution):
    """Read the attribute that shares the field's name."""

    @property
    def kind(self) -> str:
        return "direct"

    def resolve(self, instance: Any, field_name: str) -> Any:
        return _lookup(instance, field_name, field_name)


@dataclass(frozen=True)
class AccessorResolution(Resolution):
    """
    Read an alternate accessor instead of the field name.

    Methods are invoked without arguments; plain attributes and properties
    are returned as-is.
    """

    accessor: str

    @property
    def kind(self) -> str:
        return "accessor"

    def resolve(self, instance: Any, field_name: str) -> Any:
        value = _lookup(instance, self.accessor, field_name)
        if callable(value):
            return value()
        return value


@dataclass(frozen=True)
class ComputedResolution(Resolution):
    """Call a captured zero-argument function, ignoring the instance."""

    compute: Callable[[], Any]

    @property
    def kind(self) -> str:
        return "computed"

    def resolve(self, instance: Any, field_name: str) -> Any:
        return self.compute()


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Immutable declaration of one indexed field.

    Args:
        name: Field name, used as both the schema key and the document key
        field_type: Storage type of the field
        resolution: Strategy used to read the value from an instance
        options: Pass-through hints (``stored``, ``multiple``) for indexing collaborators
    """

    name: str
    field_type: FieldType
    resolution: Resolution = field(default_factory=DirectResolution)
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.isidentifier():
            msg = f"Field name must be a valid identifier, got {self.name!r}"
            raise ConfigurationError(msg)
        try:
            field_type = FieldType(self.field_type)
        except ValueError as exc:
            msg = f"Unknown field type {self.field_type!r} for field '{self.name}'"
            raise ConfigurationError(msg) from exc
        object.__setattr__(self, "field_type", field_type)
        if not isinstance(self.resolution, Resolution):
            msg = f"Field '{self.name}' needs a Resolution strategy, got {self.resolution!r}"
            raise ConfigurationError(msg)
        if not isinstance(self.options, MappingProxyType):
            object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def create(
        cls,
        field_type: FieldType | str,
        name: str,
        *,
        using: str | None = None,
        compute: Callable[[], Any] | None = None,
        **options: Any,
    ) -> FieldDescriptor:
        """Build a descriptor, choosing the resolution strategy from the overrides."""
        if using is not None and compute is not None:
            msg = f"Field '{name}' cannot declare both an accessor and an inline computation"
            raise ConfigurationError(msg)

        resolution: Resolution
        if using is not None:
            if not isinstance(using, str) or not using.isidentifier():
                msg = f"Accessor for field '{name}' must be a valid identifier, got {using!r}"
                raise ConfigurationError(msg)
            resolution = AccessorResolution(using)
        elif compute is not None:
            if not callable(compute):
                msg = f"Inline computation for field '{name}' must be callable"
                raise ConfigurationError(msg)
            resolution = ComputedResolution(compute)
        else:
            resolution = DirectResolution()

        kept = {key: value for key, value in options.items() if value is not None}
        return cls(name=name, field_type=field_type, resolution=resolution, options=MappingProxyType(kept))

    @property
    def type_tag(self) -> str:
        return self.field_type.value

    def resolve(self, instance: Any) -> Any:
        """Resolve this field's value for ``instance``."""
        return self.resolution.resolve(instance, self.name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the declaration (not the value) to a dict."""
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type_tag,
            "resolution": self.resolution.kind,
        }
        if isinstance(self.resolution, AccessorResolution):
            data["using"] = self.resolution.accessor
        if self.options:
            data["options"] = dict(self.options)
        return data
