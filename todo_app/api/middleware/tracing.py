"""Request tracing middleware.

Wraps every inbound request in a server span named "<METHOD> <URL>",
continuing the caller's trace when a traceparent header is present.
"""

from collections.abc import Callable

from fastapi import Request, Response
from opentelemetry.trace import Span, SpanKind
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from structlog.contextvars import bind_contextvars

from todo_app.api.middleware.metrics import resolve_endpoint
from todo_app.observability.tracing import SpanRecorder, extract_context, get_current_trace_id


def _request_url(request: Request) -> str:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Opens one span per request and ends it when the request finishes.

    Store spans opened while handling the request become its children.
    Responses with status >= 400 and raised faults both mark the span with
    ``error=true``; a raised fault is also recorded on the span and
    re-raised unchanged.
    """

    def __init__(self, app: ASGIApp, spans: SpanRecorder) -> None:
        super().__init__(app)
        self.spans = spans

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        method = request.method
        url = _request_url(request)

        with self.spans.span(
            f"{method} {url}",
            kind=SpanKind.SERVER,
            attributes={"http.method": method, "http.url": url},
            context=extract_context(request.headers),
        ) as span:
            trace_id = get_current_trace_id()
            bind_contextvars(trace_id=trace_id)

            try:
                response = await call_next(request)  # type: ignore[misc]
            except Exception:
                self._annotate_handler(span, request)
                span.set_attribute("error", True)
                raise

            self._annotate_handler(span, request)
            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 400:
                span.set_attribute("error", True)

            if trace_id:
                response.headers["X-Trace-ID"] = trace_id
            return response  # type: ignore[no-any-return]

    @staticmethod
    def _annotate_handler(span: Span, request: Request) -> None:
        span.set_attribute("http.route", resolve_endpoint(request))
        endpoint = request.scope.get("endpoint")
        if endpoint is not None:
            span.set_attribute("handler", getattr(endpoint, "__name__", repr(endpoint)))
