"""Request logging middleware.

Binds a request id plus method and path to structlog contextvars for the
duration of each request and emits one access log event per request.
"""

import uuid
from collections.abc import Callable
from time import perf_counter

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars

from todo_app.observability.logging import get_logger

logger = get_logger("HTTP")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs every request with request-scoped context.

    An inbound X-Request-ID header is reused; otherwise a new id is
    generated. The id is echoed back in the X-Request-ID response header.
    """

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request and bind logging context."""
        clear_contextvars()

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        logger.debug("request_started")
        start = perf_counter()

        try:
            response = await call_next(request)  # type: ignore[misc]
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((perf_counter() - start) * 1000.0, 2),
            )
            raise

        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((perf_counter() - start) * 1000.0, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response  # type: ignore[no-any-return]
