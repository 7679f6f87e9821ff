"""Lifecycle callbacks that keep a search index in step with entity persistence.

The persistence layer calls ``after_create`` / ``after_update`` /
``after_destroy``; the callbacks project the instance through its mapping and
forward the document to a ``SearchEngineClient``. No client is shipped here:
anything exposing the protocol methods works.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator
import contextlib
import logging
from typing import Any, Protocol, runtime_checkable

from searchable_mapping.config import get_settings
from searchable_mapping.mapping.builder import MappingBuilder
from searchable_mapping.mapping.schema import DirectResolution
from searchable_mapping.observability.context import push_trace_context, trace_context
from searchable_mapping.observability.tracing import create_span


logger = logging.getLogger(__name__)


@runtime_checkable
class SearchEngineClient(Protocol):
    """Search-engine surface consumed by the indexing callbacks."""

    def put_mapping(self, index: str, mappings: dict[str, Any]) -> Any:  # pragma: no cover - Protocol only
        """Create or update the index definition."""

    def index_document(  # pragma: no cover - Protocol only
        self, index: str, document_id: Any, document: dict[str, Any]
    ) -> Any:
        """Index (or replace) one document."""

    def delete_document(self, index: str, document_id: Any) -> Any:  # pragma: no cover - Protocol only
        """Remove one document from the index."""


class IndexingCallbacks:
    """Translate persistence lifecycle events into search-engine calls.

    Args:
        client: Search-engine client
        builder: Mapping of the entity type being indexed
        index_name: Target index (defaults to the pluralized document type)
        id_attribute: Instance attribute holding the document id
    """

    def __init__(
        self,
        client: SearchEngineClient,
        builder: MappingBuilder,
        *,
        index_name: str | None = None,
        id_attribute: str = "id",
    ) -> None:
        self.client = client
        self.builder = builder
        self.index_name = index_name or f"{builder.document_type}s"
        self.id_attribute = id_attribute
        self._tracing = get_settings().tracing_enabled

    def create_index(self) -> dict[str, str]:
        """Publish the builder's mappings to the search engine."""
        with self._span("search_mapping.create_index"):
            return self.builder.publish(self._put_mapping)

    def after_create(self, instance: Any) -> bool:
        """Index a newly persisted instance. Returns True when a document was sent."""
        return self._index(instance, "create")

    def after_update(self, instance: Any, changed_attributes: Collection[str] | None = None) -> bool:
        """Re-index an updated instance unless only ignored attributes changed."""
        if changed_attributes is not None:
            relevant = set(changed_attributes) - self.builder.ignore_attribute_changes_of
            if not relevant:
                logger.debug(
                    "Skipping re-index of %s: only ignored attributes changed (%s)",
                    self.builder.entity_type.__name__,
                    sorted(changed_attributes),
                )
                return False
        return self._index(instance, "update")

    def after_destroy(self, instance: Any) -> None:
        """Remove a deleted instance from the index."""
        document_id = self._document_id(instance)
        with self._span("search_mapping.delete", {"document.id": str(document_id)}):
            self.client.delete_document(self.index_name, document_id)
            logger.debug("Deleted %s %s from %s", self.builder.entity_type.__name__, document_id, self.index_name)

    def _index(self, instance: Any, event: str) -> bool:
        unless = self.builder.unless
        if unless is not None and unless(instance):
            logger.debug("Indexing of %s suppressed by predicate", self.builder.entity_type.__name__)
            return False

        document_id = self._document_id(instance)
        attributes = {"document.id": str(document_id), "lifecycle.event": event}
        with self._span("search_mapping.index", attributes):
            document = self.builder.project(instance)
            self.client.index_document(self.index_name, document_id, document)
            logger.debug(
                "Indexed %s %s into %s (%d fields)",
                self.builder.entity_type.__name__,
                document_id,
                self.index_name,
                len(document),
            )
        return True

    def _put_mapping(self, document_type: str, _schema: dict[str, str]) -> None:
        self.client.put_mapping(self.index_name, self.builder.to_mappings(document_type))

    def _document_id(self, instance: Any) -> Any:
        return DirectResolution().resolve(instance, self.id_attribute)

    @contextlib.contextmanager
    def _span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[None]:
        entity = self.builder.entity_type.__name__
        log_context = {"entity_type": entity}
        if self._tracing:
            span_attributes = {"entity.type": entity, "index.name": self.index_name, **(attributes or {})}
            with create_span(name, attributes=span_attributes, log_context=log_context):
                yield
            return

        token = push_trace_context(**log_context)
        try:
            yield
        finally:
            trace_context.reset(token)
