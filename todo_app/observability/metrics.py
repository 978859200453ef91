"""Prometheus metrics for Todo App.

Request-level and domain-level counters, histograms and gauges, held in an
explicitly owned CollectorRegistry rather than the process-global one.
"""

from typing import Literal

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

from todo_app.observability.logging import get_logger

logger = get_logger(__name__)

REQUEST_DURATION_BUCKETS = (0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0)

OperationStatus = Literal["success", "failure"]


class MetricsRegistry:
    """Owns every metric the service exports.

    All recording methods are fire-and-forget: a failure to record is
    logged and never reaches the caller.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        collect_default_metrics: bool = True,
        default_metrics_prefix: str = "todo_app_",
    ) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        if collect_default_metrics:
            ProcessCollector(
                namespace=default_metrics_prefix.rstrip("_"),
                registry=self.registry,
            )
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self.requests_total = Counter(
            "todo_requests_total",
            "Total number of TODO requests",
            labelnames=["method", "endpoint", "status"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "todo_request_duration_seconds",
            "Duration of TODO requests in seconds",
            labelnames=["method", "endpoint"],
            buckets=REQUEST_DURATION_BUCKETS,
            registry=self.registry,
        )
        self.operations_total = Counter(
            "todo_operations_total",
            "Total number of TODO operations",
            labelnames=["operation", "status"],
            registry=self.registry,
        )
        self.todo_count = Gauge(
            "todo_count",
            "Current number of TODOs",
            labelnames=["status"],
            registry=self.registry,
        )
        self.errors_total = Counter(
            "todo_errors_total",
            "Total number of TODO errors",
            labelnames=["operation", "error_type"],
            registry=self.registry,
        )

    def increment_request_counter(self, method: str, endpoint: str, status_code: int) -> None:
        try:
            self.requests_total.labels(
                method=method, endpoint=endpoint, status=str(status_code)
            ).inc()
        except Exception as e:
            logger.warning("metric_record_failed", metric="todo_requests_total", error=str(e))

    def record_request_duration(self, method: str, endpoint: str, duration_seconds: float) -> None:
        try:
            self.request_duration.labels(method=method, endpoint=endpoint).observe(
                duration_seconds
            )
        except Exception as e:
            logger.warning(
                "metric_record_failed", metric="todo_request_duration_seconds", error=str(e)
            )

    def increment_operation_counter(self, operation: str, status: OperationStatus) -> None:
        try:
            self.operations_total.labels(operation=operation, status=status).inc()
        except Exception as e:
            logger.warning("metric_record_failed", metric="todo_operations_total", error=str(e))

    def set_todo_count(self, completed: int, pending: int) -> None:
        """Publish absolute completed/pending counts."""
        try:
            self.todo_count.labels(status="completed").set(completed)
            self.todo_count.labels(status="pending").set(pending)
        except Exception as e:
            logger.warning("metric_record_failed", metric="todo_count", error=str(e))

    def increment_error_counter(self, operation: str, error_type: str) -> None:
        try:
            self.errors_total.labels(operation=operation, error_type=error_type).inc()
        except Exception as e:
            logger.warning("metric_record_failed", metric="todo_errors_total", error=str(e))

    def render(self) -> bytes:
        """Render all registered metrics in Prometheus text exposition format."""
        return generate_latest(self.registry)
