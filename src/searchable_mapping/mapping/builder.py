"""Mapping builder: field registration, schema derivation and document projection.

One ``MappingBuilder`` belongs to one entity type. Fields are registered once,
typically while the entity class is being defined, and the fixed descriptor
list is then used to derive the index schema and to project every instance
into a flat document.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterator
import logging
import re
from typing import Any

from searchable_mapping.mapping.errors import ConfigurationError
from searchable_mapping.mapping.schema import FieldDescriptor, FieldType


logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

SchemaSink = Callable[[str, dict[str, str]], Any]


def document_type_for(entity_type: type) -> str:
    """Return the snake_case document type name for an entity class."""
    return _CAMEL_BOUNDARY.sub("_", entity_type.__name__).lower()


class MappingBuilder:
    """Accumulate field descriptors for one entity type.

    Args:
        entity_type: The class whose instances are projected
        ignore_attribute_changes_of: Attribute names whose changes alone do not
            require re-indexing (consumed by indexing callbacks, not the builder)
        unless: Predicate that suppresses indexing of an instance when truthy
            (consumed by indexing callbacks, not the builder)
        seal_on_publish: Reject registrations once the schema has been published
    """

    def __init__(
        self,
        entity_type: type,
        *,
        ignore_attribute_changes_of: Collection[str] = (),
        unless: Callable[[Any], bool] | None = None,
        seal_on_publish: bool = False,
    ) -> None:
        self.entity_type = entity_type
        self.ignore_attribute_changes_of = frozenset(ignore_attribute_changes_of)
        self.unless = unless
        self.seal_on_publish = seal_on_publish
        self._fields: list[FieldDescriptor] = []
        self._names: set[str] = set()
        self._published = False

    def __repr__(self) -> str:
        return f"MappingBuilder({self.entity_type.__name__}, fields={[f.name for f in self._fields]})"

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __getitem__(self, name: str) -> FieldDescriptor:
        for descriptor in self._fields:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(self._fields)

    @property
    def published(self) -> bool:
        return self._published

    @property
    def document_type(self) -> str:
        return document_type_for(self.entity_type)

    def text(
        self,
        name: str,
        compute: Callable[[], Any] | None = None,
        *,
        using: str | None = None,
        stored: bool | None = None,
        multiple: bool | None = None,
    ) -> None:
        """Register an analyzed full-text field."""
        self._register(FieldType.TEXT, name, compute, using=using, stored=stored, multiple=multiple)

    def keyword(
        self,
        name: str,
        compute: Callable[[], Any] | None = None,
        *,
        using: str | None = None,
        stored: bool | None = None,
        multiple: bool | None = None,
    ) -> None:
        """Register an exact-match keyword field."""
        self._register(FieldType.KEYWORD, name, compute, using=using, stored=stored, multiple=multiple)

    def date(
        self,
        name: str,
        compute: Callable[[], Any] | None = None,
        *,
        using: str | None = None,
        stored: bool | None = None,
        multiple: bool | None = None,
    ) -> None:
        """Register a date field."""
        self._register(FieldType.DATE, name, compute, using=using, stored=stored, multiple=multiple)

    def long(
        self,
        name: str,
        compute: Callable[[], Any] | None = None,
        *,
        using: str | None = None,
        stored: bool | None = None,
        multiple: bool | None = None,
    ) -> None:
        """Register a 64-bit integer field."""
        self._register(FieldType.LONG, name, compute, using=using, stored=stored, multiple=multiple)

    def double(
        self,
        name: str,
        compute: Callable[[], Any] | None = None,
        *,
        using: str | None = None,
        stored: bool | None = None,
        multiple: bool | None = None,
    ) -> None:
        """Register a double-precision float field."""
        self._register(FieldType.DOUBLE, name, compute, using=using, stored=stored, multiple=multiple)

    def _register(
        self,
        field_type: FieldType,
        name: str,
        compute: Callable[[], Any] | None,
        *,
        using: str | None,
        **options: Any,
    ) -> None:
        descriptor = FieldDescriptor.create(field_type, name, using=using, compute=compute, **options)

        if descriptor.name in self._names:
            msg = f"Field '{descriptor.name}' is already registered for {self.entity_type.__name__}"
            raise ConfigurationError(msg)
        if self._published:
            if self.seal_on_publish:
                msg = (
                    f"Cannot register field '{descriptor.name}': the {self.entity_type.__name__} "
                    "schema has already been published"
                )
                raise ConfigurationError(msg)
            logger.warning(
                "Field '%s' registered after the %s schema was published; the live index schema is stale",
                descriptor.name,
                self.entity_type.__name__,
            )

        self._fields.append(descriptor)
        self._names.add(descriptor.name)
        logger.debug("Registered %s field '%s' on %s", descriptor.type_tag, descriptor.name, self.entity_type.__name__)

    def derive_schema(self) -> dict[str, str]:
        """Return field name -> type tag, in registration order."""
        return {descriptor.name: descriptor.type_tag for descriptor in self._fields}

    def to_mappings(self, document_type: str | None = None) -> dict[str, Any]:
        """Return the schema in the search engine's mappings layout."""
        properties = {name: {"type": tag} for name, tag in self.derive_schema().items()}
        return {document_type or self.document_type: {"properties": properties}}

    def publish(self, sink: SchemaSink) -> dict[str, str]:
        """Hand the derived schema to an index-definition collaborator.

        Args:
            sink: Called as ``sink(document_type, schema)``

        Returns:
            The published schema
        """
        schema = self.derive_schema()
        sink(self.document_type, schema)
        self._published = True
        logger.debug("Published %s schema with %d fields", self.entity_type.__name__, len(schema))
        return schema

    def project(self, instance: Any) -> dict[str, Any]:
        """Resolve every registered field for ``instance``.

        Values are passed through without coercion. Raises
        ``AttributeResolutionError`` when an attribute or accessor is missing;
        errors raised by inline computations propagate unchanged.
        """
        return {descriptor.name: descriptor.resolve(instance) for descriptor in self._fields}

    # Aliases. Kept last: ``float`` and ``integer`` shadow builtins in the class body.
    string = keyword
    time = date
    integer = long
    float = double
