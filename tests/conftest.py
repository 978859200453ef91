"""Shared test fixtures for the Todo App test suite."""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace import ReadableSpan, SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from todo_app.config.settings import Settings
from todo_app.observability.metrics import MetricsRegistry
from todo_app.observability.tracing import TRACER_NAME, SpanRecorder
from todo_app.todos.service import TodosService


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "production.toml": "port = 8080",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def isolated_config(
    test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point configuration at an empty directory and clear cached settings.

    Tests start from code defaults regardless of the checkout's config/
    directory or the caller's environment.
    """
    from todo_app.config import get_settings

    monkeypatch.setenv("TODO_APP_CONFIG_DIR", str(test_config_dir))
    for name in ("TODO_APP_ENV", "PORT", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class CountingSpanProcessor(SpanProcessor):
    """Counts spans as they start and end."""

    def __init__(self) -> None:
        self.started = 0
        self.ended = 0

    def on_start(self, span: Any, parent_context: Any = None) -> None:
        self.started += 1

    def on_end(self, span: ReadableSpan) -> None:
        self.ended += 1

    @property
    def open(self) -> int:
        return self.started - self.ended


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Collects finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def span_counter() -> CountingSpanProcessor:
    """Counts started and ended spans."""
    return CountingSpanProcessor()


@pytest.fixture
def tracer_provider(
    span_exporter: InMemorySpanExporter, span_counter: CountingSpanProcessor
) -> TracerProvider:
    """Tracer provider exporting to memory, never installed globally."""
    provider = TracerProvider()
    provider.add_span_processor(span_counter)
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


@pytest.fixture
def spans(tracer_provider: TracerProvider) -> SpanRecorder:
    """Span recorder bound to the in-memory tracer provider."""
    return SpanRecorder(tracer_provider.get_tracer(TRACER_NAME))


@pytest.fixture
def metrics() -> MetricsRegistry:
    """Fresh metrics registry without process metrics."""
    return MetricsRegistry(collect_default_metrics=False)


@pytest.fixture
def todos_service(metrics: MetricsRegistry, spans: SpanRecorder) -> TodosService:
    """Fresh, empty todo store."""
    return TodosService(metrics=metrics, spans=spans)


@pytest.fixture
def settings() -> Settings:
    """Test settings with console span export disabled."""
    return Settings(
        environment="test",
        observability={"tracing": {"console_export": False}},
    )


@pytest.fixture
def app(
    settings: Settings, metrics: MetricsRegistry, tracer_provider: TracerProvider
) -> FastAPI:
    """Fully wired application using the in-memory metrics and tracing."""
    from todo_app.api.app import create_app

    return create_app(settings, metrics=metrics, tracer_provider=tracer_provider)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client that turns unhandled faults into 500 responses."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def metric_value(metrics: MetricsRegistry) -> Callable[..., float]:
    """Read a sample from the test registry; 0.0 when it was never recorded.

    Usage:
        metric_value("todo_operations_total", operation="create", status="success")
    """

    def _metric_value(name: str, **labels: str) -> float:
        return metrics.registry.get_sample_value(name, labels) or 0.0

    return _metric_value
