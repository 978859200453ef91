"""Nested configuration models."""

from todo_app.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)

__all__ = [
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "TracingConfig",
]
