"""Request metrics middleware.

Counts every request and observes its wall-clock duration, labeled by
method and route pattern, whether the downstream handler returns or raises.
"""

from collections.abc import Callable
from time import perf_counter

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from todo_app.observability.metrics import MetricsRegistry


def resolve_endpoint(request: Request) -> str:
    """Return the matched route pattern, or the raw path when nothing matched."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or request.url.path


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and duration into the MetricsRegistry."""

    def __init__(self, app: ASGIApp, metrics: MetricsRegistry) -> None:
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        start = perf_counter()
        try:
            response = await call_next(request)  # type: ignore[misc]
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            self._observe(request, status_code if isinstance(status_code, int) else 500, start)
            raise

        self._observe(request, response.status_code, start)
        return response  # type: ignore[no-any-return]

    def _observe(self, request: Request, status_code: int, start: float) -> None:
        duration = perf_counter() - start
        endpoint = resolve_endpoint(request)
        self.metrics.increment_request_counter(request.method, endpoint, status_code)
        self.metrics.record_request_duration(request.method, endpoint, duration)
