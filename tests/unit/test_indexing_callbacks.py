"""Unit tests for lifecycle indexing callbacks."""

import json
import logging
from unittest.mock import Mock

from opentelemetry.trace import StatusCode
import pytest

from searchable_mapping.config import get_settings
from searchable_mapping.indexing import IndexingCallbacks, SearchEngineClient
from searchable_mapping.mapping.builder import MappingBuilder
from searchable_mapping.mapping.errors import AttributeResolutionError
from searchable_mapping.observability import JsonFormatter, trace_context
from tests.fixtures.entities import Article


pytestmark = pytest.mark.unit


@pytest.fixture
def client() -> Mock:
    return Mock(spec=["put_mapping", "index_document", "delete_document"])


@pytest.fixture
def builder() -> MappingBuilder:
    builder = MappingBuilder(Article, ignore_attribute_changes_of=["views"], unless=lambda a: a.title == "draft")
    builder.text("title")
    builder.long("views")
    return builder


@pytest.fixture
def callbacks(client, builder) -> IndexingCallbacks:
    return IndexingCallbacks(client, builder)


class _StubClient:
    def put_mapping(self, index, mappings):
        return None

    def index_document(self, index, document_id, document):
        return None

    def delete_document(self, index, document_id):
        return None


def test_client_protocol_is_structural():
    assert isinstance(_StubClient(), SearchEngineClient)
    assert not isinstance(object(), SearchEngineClient)


def test_default_index_name_is_pluralized_document_type(callbacks):
    assert callbacks.index_name == "articles"


def test_create_index_puts_mappings_and_publishes(callbacks, client, builder):
    schema = callbacks.create_index()

    assert schema == {"title": "text", "views": "long"}
    client.put_mapping.assert_called_once_with(
        "articles",
        {"article": {"properties": {"title": {"type": "text"}, "views": {"type": "long"}}}},
    )
    assert builder.published


def test_after_create_indexes_projected_document(callbacks, client):
    assert callbacks.after_create(Article(id=7, title="hello", views=2)) is True

    client.index_document.assert_called_once_with("articles", 7, {"title": "hello", "views": 2})


def test_unless_predicate_suppresses_indexing(callbacks, client):
    assert callbacks.after_create(Article(title="draft")) is False
    assert callbacks.after_update(Article(title="draft")) is False

    client.index_document.assert_not_called()


def test_after_update_skips_when_only_ignored_attributes_changed(callbacks, client):
    assert callbacks.after_update(Article(), changed_attributes=["views"]) is False

    client.index_document.assert_not_called()


def test_after_update_reindexes_on_relevant_change(callbacks, client):
    assert callbacks.after_update(Article(id=3, title="new"), changed_attributes=["views", "title"]) is True

    client.index_document.assert_called_once_with("articles", 3, {"title": "new", "views": 3})


def test_after_update_without_change_set_always_reindexes(callbacks, client):
    assert callbacks.after_update(Article()) is True
    client.index_document.assert_called_once()


def test_after_destroy_deletes_document(callbacks, client):
    callbacks.after_destroy(Article(id=9))

    client.delete_document.assert_called_once_with("articles", 9)


def test_custom_index_and_id_attribute(client, builder):
    callbacks = IndexingCallbacks(client, builder, index_name="content", id_attribute="title")

    callbacks.after_create(Article(title="slug-1"))

    client.index_document.assert_called_once_with("content", "slug-1", {"title": "slug-1", "views": 3})


def test_missing_id_raises_resolution_error(client, builder):
    callbacks = IndexingCallbacks(client, builder, id_attribute="uuid")

    with pytest.raises(AttributeResolutionError, match="uuid"):
        callbacks.after_create(Article())
    client.index_document.assert_not_called()


def test_projection_failure_sends_nothing(client):
    builder = MappingBuilder(Article)
    builder.text("summary")

    with pytest.raises(AttributeResolutionError):
        IndexingCallbacks(client, builder).after_create(Article())
    client.index_document.assert_not_called()


def test_client_errors_propagate(callbacks, client):
    client.index_document.side_effect = ConnectionError("search engine down")

    with pytest.raises(ConnectionError):
        callbacks.after_create(Article())


def test_index_call_is_traced(callbacks, span_exporter):
    callbacks.after_create(Article(id=5))

    spans = span_exporter.get_finished_spans()
    assert [span.name for span in spans] == ["search_mapping.index"]
    attributes = spans[0].attributes
    assert attributes["entity.type"] == "Article"
    assert attributes["index.name"] == "articles"
    assert attributes["document.id"] == "5"
    assert attributes["lifecycle.event"] == "create"


def test_failed_call_marks_span_as_error(callbacks, client, span_exporter):
    client.delete_document.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        callbacks.after_destroy(Article())

    (span,) = span_exporter.get_finished_spans()
    assert span.name == "search_mapping.delete"
    assert span.status.status_code == StatusCode.ERROR


def test_tracing_can_be_disabled(client, builder, span_exporter, monkeypatch):
    monkeypatch.setenv("SEARCHABLE_MAPPING_TRACING_ENABLED", "false")
    get_settings.cache_clear()

    IndexingCallbacks(client, builder).after_create(Article())

    assert span_exporter.get_finished_spans() == ()
    client.index_document.assert_called_once()


@pytest.fixture
def json_caplog(caplog):
    caplog.handler.setFormatter(JsonFormatter())
    with caplog.at_level(logging.DEBUG, logger="searchable_mapping.indexing"):
        yield caplog


def _json_lines(caplog):
    return [json.loads(line) for line in caplog.text.splitlines() if line.strip()]


def test_logs_inside_callbacks_carry_entity_type(callbacks, span_exporter, json_caplog):
    callbacks.after_create(Article(id=5))

    (entry,) = [entry for entry in _json_lines(json_caplog) if entry["message"].startswith("Indexed")]
    (span,) = span_exporter.get_finished_spans()
    assert entry["entity_type"] == "Article"
    assert entry["span_id"] == format(span.context.span_id, "016x")


def test_logs_carry_entity_type_without_tracing(client, builder, monkeypatch, json_caplog):
    monkeypatch.setenv("SEARCHABLE_MAPPING_TRACING_ENABLED", "false")
    get_settings.cache_clear()

    IndexingCallbacks(client, builder).after_destroy(Article(id=4))

    (entry,) = _json_lines(json_caplog)
    assert entry["entity_type"] == "Article"


def test_log_context_restored_after_callback(callbacks, span_exporter):
    token = trace_context.set({"trace_id": "a" * 32, "span_id": "b" * 16})
    try:
        callbacks.after_create(Article())
        callbacks.after_destroy(Article())

        assert trace_context.get() == {"trace_id": "a" * 32, "span_id": "b" * 16}
    finally:
        trace_context.reset(token)
