"""
OpenTelemetry tracing setup.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Tracer

from jobqueue import __version__
from jobqueue.config import get_settings

# Global tracer instance
_tracer: Tracer | None = None


def setup_tracing(enable_console_export: bool | None = None) -> Tracer:
    """
    Set up OpenTelemetry tracing.

    Args:
        enable_console_export: If True, also export spans to console.
            Defaults to the otel_console_export setting.

    Returns:
        Tracer: The tracer instance.
    """
    global _tracer

    settings = get_settings()
    if enable_console_export is None:
        enable_console_export = settings.otel_console_export

    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.version": __version__,
        }
    )

    provider = TracerProvider(resource=resource)

    if enable_console_export:
        provider.add_span_processor(
            BatchSpanProcessor(ConsoleSpanExporter())
        )

    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(settings.otel_service_name)

    return _tracer


def get_tracer() -> Tracer:
    """
    Get the tracer instance.

    Returns:
        Tracer: The tracer instance, set up on first use.
    """
    global _tracer
    if _tracer is None:
        _tracer = setup_tracing()
    return _tracer


def set_span_attributes(span: Any, **attributes: Any) -> None:
    """
    Copy non-None attributes onto a span.

    Args:
        span: The span to annotate.
        **attributes: Span attributes. Values that are not primitive OpenTelemetry
            attribute types are stringified.
    """
    for key, value in attributes.items():
        if value is None:
            continue
        if not isinstance(value, (bool, int, float, str)):
            value = str(value)
        span.set_attribute(key, value)
