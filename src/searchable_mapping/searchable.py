"""Attach a search mapping to an entity class.

The entity class owns exactly one ``MappingBuilder``, stored on the class as
``search_mapping``. Fields are declared by a setup function that receives the
builder explicitly::

    def todo_fields(mapping: MappingBuilder) -> None:
        mapping.text("todo")
        mapping.text("todo_surround", using="surround_todo")

    @searchable(todo_fields)
    class Todo(Searchable):
        ...
"""

from __future__ import annotations

from collections.abc import Callable, Collection
import logging
from typing import Any, ClassVar, TypeVar

from searchable_mapping.config import get_settings
from searchable_mapping.mapping.builder import MappingBuilder, SchemaSink
from searchable_mapping.mapping.errors import ConfigurationError


logger = logging.getLogger(__name__)

_SEARCH_MAPPING_ATTR = "search_mapping"

T = TypeVar("T", bound=type)


def search_mapping_for(entity_type: type) -> MappingBuilder:
    """Return the builder attached to ``entity_type``."""
    builder = entity_type.__dict__.get(_SEARCH_MAPPING_ATTR)
    if not isinstance(builder, MappingBuilder):
        msg = f"{entity_type.__name__} has no search mapping; decorate it with @searchable"
        raise ConfigurationError(msg)
    return builder


def searchable(
    setup: Callable[[MappingBuilder], None],
    *,
    ignore_attribute_changes_of: Collection[str] = (),
    unless: Callable[[Any], bool] | None = None,
    index_definition: SchemaSink | None = None,
    seal_on_publish: bool | None = None,
) -> Callable[[T], T]:
    """Class decorator declaring the indexed fields of an entity class.

    Args:
        setup: Receives the class's builder and registers its fields
        ignore_attribute_changes_of: Attributes whose changes do not trigger re-indexing
        unless: Predicate that suppresses indexing of an instance when truthy
        index_definition: Optional collaborator the schema is published to once
            the fields are registered
        seal_on_publish: Reject late registrations after publication
            (defaults to the ``seal_on_publish`` setting)
    """

    def decorate(entity_type: T) -> T:
        if _SEARCH_MAPPING_ATTR in entity_type.__dict__:
            msg = f"{entity_type.__name__} already has a search mapping"
            raise ConfigurationError(msg)

        seal = get_settings().seal_on_publish if seal_on_publish is None else seal_on_publish
        builder = MappingBuilder(
            entity_type,
            ignore_attribute_changes_of=ignore_attribute_changes_of,
            unless=unless,
            seal_on_publish=seal,
        )
        setup(builder)
        setattr(entity_type, _SEARCH_MAPPING_ATTR, builder)
        logger.debug("Declared search mapping for %s with %d fields", entity_type.__name__, len(builder))

        if index_definition is not None:
            builder.publish(index_definition)
        return entity_type

    return decorate


class Searchable:
    """Mixin exposing the class's search mapping on instances."""

    search_mapping: ClassVar[MappingBuilder]

    def as_indexed_json(self, options: dict[str, Any] | None = None) -> dict[str, Any]:
        """Return the document sent to the search engine for this instance.

        ``options`` is accepted for callers that pass serializer options and is ignored.
        """
        return search_mapping_for(type(self)).project(self)

    @classmethod
    def mappings(cls) -> dict[str, Any]:
        """Return the index mappings for this class."""
        return search_mapping_for(cls).to_mappings()
