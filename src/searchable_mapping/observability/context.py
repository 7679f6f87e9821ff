"""Context propagation for trace correlation in log records."""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING
from uuid import uuid4


if TYPE_CHECKING:
    from opentelemetry.trace import Span

trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Get current trace context with trace_id and span_id."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {**(ctx or {}), "trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    """Set trace context for the current context."""
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def with_otel_span(span: Span) -> dict:
    """Extract trace context from an OpenTelemetry span."""
    ctx = span.get_span_context()
    return {
        "trace_id": format(ctx.trace_id, "032x"),
        "span_id": format(ctx.span_id, "016x"),
    }


def push_trace_context(**values: object) -> Token:
    """Layer ``values`` over the current context; pass the token to ``trace_context.reset``."""
    return trace_context.set({**(trace_context.get() or {}), **values})
