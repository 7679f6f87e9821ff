"""Shared test fixtures and configuration."""

from pathlib import Path
import sys

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from searchable_mapping.config import get_settings
from searchable_mapping.observability import tracing as tracing_module
from tests.fixtures.entities import Article


# Test environment overriding every configurable value
TEST_ENV = {
    "SEARCHABLE_MAPPING_LOG_LEVEL": "debug",
    "SEARCHABLE_MAPPING_LOG_JSON": "true",
    "SEARCHABLE_MAPPING_SEAL_ON_PUBLISH": "false",
    "SEARCHABLE_MAPPING_TRACING_ENABLED": "true",
    "SEARCHABLE_MAPPING_SERVICE_NAME": "searchable-mapping-tests",
}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin settings to test defaults and drop the cached instance around each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def span_exporter(monkeypatch) -> InMemorySpanExporter:
    """Route spans created by the package into an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setitem(tracing_module._tracer_holder, "tracer", provider.get_tracer("tests"))
    return exporter


@pytest.fixture
def article() -> Article:
    return Article()
