"""Observability configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """Logging configuration.

    Level and format are derived from the environment when left unset.
    """

    level: LogLevel | None = Field(default=None, description="Log level")
    format: LogFormat | None = Field(default=None, description="Output format")


class TracingConfig(BaseModel):
    """Distributed tracing configuration."""

    enabled: bool = Field(default=True, description="Enable tracing")
    service_name: str = Field(default="todo-app", description="Service name for traces")
    console_export: bool = Field(default=True, description="Export finished spans to the console")
    otlp_endpoint: str | None = Field(
        default=None,
        description="OTLP gRPC exporter endpoint",
    )


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    enabled: bool = Field(default=True, description="Expose the metrics endpoint")
    path: str = Field(default="/metrics", description="Metrics endpoint path")
    collect_default_metrics: bool = Field(
        default=True,
        description="Register process, platform and GC metrics alongside the todo metrics",
    )
    default_metrics_prefix: str = Field(
        default="todo_app_",
        description="Name prefix for default process metrics",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )
    tracing: TracingConfig = Field(
        default_factory=TracingConfig,
        description="Tracing settings",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Metrics settings",
    )
