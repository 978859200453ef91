"""Todo App: an in-memory todo service with Prometheus metrics and OpenTelemetry tracing."""

__version__ = "1.0.0"
