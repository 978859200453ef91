"""Tests for request logging, tracing and metrics middleware."""

from collections.abc import Callable

from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
TRACEPARENT = f"00-{TRACE_ID}-00f067aa0ba902b7-01"


def _server_spans(exporter: InMemorySpanExporter) -> list:
    return [s for s in exporter.get_finished_spans() if s.kind is SpanKind.SERVER]


class TestRequestMetrics:
    """Request counter and duration histogram."""

    def test_counts_by_route_pattern(
        self, client: TestClient, metric_value: Callable[..., float]
    ) -> None:
        todo_id = client.post("/todos", json={"title": "t"}).json()["id"]
        client.get(f"/todos/{todo_id}")
        client.get(f"/todos/{todo_id}")

        assert metric_value(
            "todo_requests_total", method="POST", endpoint="/todos", status="201"
        ) == 1
        assert metric_value(
            "todo_requests_total", method="GET", endpoint="/todos/{todo_id}", status="200"
        ) == 2
        assert metric_value(
            "todo_request_duration_seconds_count", method="GET", endpoint="/todos/{todo_id}"
        ) == 2

    def test_counts_not_found(
        self, client: TestClient, metric_value: Callable[..., float]
    ) -> None:
        client.delete("/todos/missing")

        assert metric_value(
            "todo_requests_total", method="DELETE", endpoint="/todos/{todo_id}", status="404"
        ) == 1

    def test_counts_validation_failure(
        self, client: TestClient, metric_value: Callable[..., float]
    ) -> None:
        client.post("/todos", json={})

        assert metric_value(
            "todo_requests_total", method="POST", endpoint="/todos", status="400"
        ) == 1

    def test_counts_unexpected_fault(
        self, client: TestClient, app, metric_value: Callable[..., float]
    ) -> None:
        def broken() -> list:
            raise RuntimeError("boom")

        app.state.todos_service.find_all = broken

        assert client.get("/todos").status_code == 500
        assert metric_value(
            "todo_requests_total", method="GET", endpoint="/todos", status="500"
        ) == 1
        assert metric_value(
            "todo_request_duration_seconds_count", method="GET", endpoint="/todos"
        ) == 1

    def test_unmatched_path_uses_raw_path(
        self, client: TestClient, metric_value: Callable[..., float]
    ) -> None:
        client.get("/nowhere")

        assert metric_value(
            "todo_requests_total", method="GET", endpoint="/nowhere", status="404"
        ) == 1


class TestRequestTracing:
    """Request spans."""

    def test_span_per_request(
        self, client: TestClient, span_exporter: InMemorySpanExporter
    ) -> None:
        client.get("/todos?limit=5")

        (span,) = _server_spans(span_exporter)
        assert span.name == "GET /todos?limit=5"
        assert span.attributes["http.method"] == "GET"
        assert span.attributes["http.url"] == "/todos?limit=5"
        assert span.attributes["http.route"] == "/todos"
        assert span.attributes["http.status_code"] == 200
        assert span.attributes["handler"] == "find_all"
        assert "error" not in span.attributes
        assert span.status.status_code is StatusCode.OK

    def test_store_spans_are_children(
        self, client: TestClient, span_exporter: InMemorySpanExporter
    ) -> None:
        client.post("/todos", json={"title": "t"})

        (request_span,) = _server_spans(span_exporter)
        (store_span,) = [
            s for s in span_exporter.get_finished_spans() if s.name == "TodosService.create"
        ]
        assert store_span.parent is not None
        assert store_span.parent.span_id == request_span.context.span_id

    def test_not_found_marks_error(
        self, client: TestClient, span_exporter: InMemorySpanExporter
    ) -> None:
        client.get("/todos/missing")

        (span,) = _server_spans(span_exporter)
        assert span.attributes["error"] is True
        assert span.attributes["http.status_code"] == 404
        assert span.status.status_code is StatusCode.ERROR

    def test_unexpected_fault_marks_error(
        self, client: TestClient, app, span_exporter: InMemorySpanExporter, span_counter
    ) -> None:
        def broken() -> list:
            raise RuntimeError("boom")

        app.state.todos_service.find_all = broken

        client.get("/todos")

        (span,) = _server_spans(span_exporter)
        assert span.attributes["error"] is True
        assert span.attributes["http.route"] == "/todos"
        assert span.status.status_code is StatusCode.ERROR
        assert span.status.description == "boom"
        assert span_counter.open == 0

    def test_continues_incoming_trace(
        self, client: TestClient, span_exporter: InMemorySpanExporter
    ) -> None:
        response = client.get("/todos", headers={"traceparent": TRACEPARENT})

        (span,) = _server_spans(span_exporter)
        assert format(span.context.trace_id, "032x") == TRACE_ID
        assert format(span.parent.span_id, "016x") == "00f067aa0ba902b7"
        assert response.headers["X-Trace-ID"] == TRACE_ID

    def test_new_trace_without_traceparent(
        self, client: TestClient, span_exporter: InMemorySpanExporter
    ) -> None:
        response = client.get("/health")

        (span,) = _server_spans(span_exporter)
        assert span.parent is None
        assert response.headers["X-Trace-ID"] == format(span.context.trace_id, "032x")


class TestRequestLogging:
    """Request id handling."""

    def test_generates_request_id(self, client: TestClient) -> None:
        first = client.get("/health").headers["X-Request-ID"]
        second = client.get("/health").headers["X-Request-ID"]

        assert first
        assert first != second

    def test_reuses_incoming_request_id(self, client: TestClient) -> None:
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_on_error_responses(self, client: TestClient) -> None:
        response = client.get("/todos/missing", headers={"X-Request-ID": "req-404"})
        assert response.headers["X-Request-ID"] == "req-404"
