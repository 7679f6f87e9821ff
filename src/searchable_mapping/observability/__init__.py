"""Observability module for structured logging and OpenTelemetry tracing."""

from searchable_mapping.observability.bootstrap import configure_observability
from searchable_mapping.observability.context import get_trace_context, set_trace_context, trace_context
from searchable_mapping.observability.logging import JsonFormatter, configure_logging
from searchable_mapping.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "configure_observability",
    "create_span",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
]
