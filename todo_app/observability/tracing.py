"""OpenTelemetry distributed tracing setup.

Provides tracer provider setup, W3C trace context extraction, and the
SpanRecorder used to scope units of work in spans.
"""

import os
from collections.abc import Callable, Generator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from todo_app.config.models.observability import TracingConfig

TRACER_NAME = "todo-app"

T = TypeVar("T")

# W3C Trace Context propagator
_propagator = TraceContextTextMapPropagator()


def setup_tracing(
    config: TracingConfig | None = None,
    *,
    register_global: bool = True,
) -> TracerProvider:
    """Build a tracer provider from configuration.

    Spans go to the console through a simple (synchronous) processor when
    console export is enabled, and to an OTLP collector through a batch
    processor when an endpoint is configured.

    Args:
        config: Tracing configuration (defaults when omitted)
        register_global: Also install the provider as the global provider

    Returns:
        Configured TracerProvider
    """
    config = config or TracingConfig()

    resource = Resource.create({SERVICE_NAME: config.service_name})
    provider = TracerProvider(resource=resource)

    endpoint = config.otlp_endpoint or os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
        )

    if config.console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if register_global:
        trace.set_tracer_provider(provider)

    return provider


def get_tracer() -> Tracer:
    """Get the service tracer from the global provider (no-op until one is set)."""
    return trace.get_tracer(TRACER_NAME)


def extract_context(headers: Mapping[str, str]) -> Context:
    """Extract trace context from HTTP headers (traceparent/tracestate)."""
    return _propagator.extract(carrier=dict(headers))


def get_current_trace_id() -> str | None:
    """Get the current trace ID as a hex string, or None outside a trace."""
    span = trace.get_current_span()
    if span and span.get_span_context().is_valid:
        return format(span.get_span_context().trace_id, "032x")
    return None


def record_exception(span: Span, exception: BaseException) -> None:
    """Record an exception on a span and mark the span as failed."""
    span.set_status(Status(StatusCode.ERROR, str(exception)))
    span.record_exception(exception)


class SpanRecorder:
    """Scopes units of work in spans with guaranteed closure.

    Every span opened here is ended exactly once, whether the work returns,
    raises, or the enclosing generator is closed early.
    """

    def __init__(self, tracer: Tracer | None = None) -> None:
        self._tracer = tracer

    @property
    def tracer(self) -> Tracer:
        return self._tracer if self._tracer is not None else get_tracer()

    @contextmanager
    def span(
        self,
        name: str,
        *,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: dict[str, Any] | None = None,
        context: Context | None = None,
    ) -> Generator[Span, None, None]:
        """Open a span, make it current, and end it on every exit path.

        On normal exit the span status is OK unless an error was already
        recorded on it while it was open. On an exception the status is
        ERROR with the exception message, the exception is recorded, and it
        is re-raised unchanged.
        """
        span = self.tracer.start_span(
            name, kind=kind, attributes=attributes or {}, context=context
        )
        try:
            with trace.use_span(
                span,
                end_on_exit=False,
                record_exception=False,
                set_status_on_exception=False,
            ):
                yield span
        except Exception as e:
            record_exception(span, e)
            raise
        else:
            status = getattr(span, "status", None)
            if status is None or status.status_code is not StatusCode.ERROR:
                span.set_status(Status(StatusCode.OK))
        finally:
            span.end()

    def execute_in_span(self, name: str, work: Callable[[Span], T]) -> T:
        """Run ``work`` inside a span named ``name`` and return its result."""
        with self.span(name) as span:
            return work(span)

    @staticmethod
    def set_attribute(span: Span | None, key: str, value: Any) -> None:
        if span is not None:
            span.set_attribute(key, value)

    @staticmethod
    def add_event(span: Span | None, name: str, attributes: dict[str, Any] | None = None) -> None:
        if span is not None:
            span.add_event(name, attributes=attributes)
