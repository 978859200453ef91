"""API middleware package.

Request-wide logging context, tracing and metrics. Each middleware only
observes the request; none of them alters a response or swallows a fault.
"""

from todo_app.api.middleware.context import RequestLoggingMiddleware
from todo_app.api.middleware.metrics import RequestMetricsMiddleware, resolve_endpoint
from todo_app.api.middleware.tracing import RequestTracingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "RequestMetricsMiddleware",
    "RequestTracingMiddleware",
    "resolve_endpoint",
]
