"""Process-level observability setup driven by Settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from searchable_mapping.config import Settings, get_settings
from searchable_mapping.observability import tracing
from searchable_mapping.observability.logging import configure_logging


if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider


def configure_observability(settings: Settings | None = None) -> TracerProvider | None:
    """Configure logging and, when enabled, tracing. Returns the tracer provider if one was created."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)
    if not settings.tracing_enabled:
        return None
    return tracing.init_tracing(settings.service_name)
