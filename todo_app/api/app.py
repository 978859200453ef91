"""FastAPI application factory.

Creates and configures the FastAPI application with observability,
middleware, exception handlers, and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from todo_app import __version__
from todo_app.api.exceptions import TodoAppAPIError
from todo_app.api.middleware import (
    RequestLoggingMiddleware,
    RequestMetricsMiddleware,
    RequestTracingMiddleware,
)
from todo_app.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from todo_app.api.routes import register_routes
from todo_app.config import Settings, get_settings
from todo_app.observability.logging import get_logger, setup_logging
from todo_app.observability.metrics import MetricsRegistry
from todo_app.observability.tracing import (
    TRACER_NAME,
    SpanRecorder,
    record_exception,
    setup_tracing,
)
from todo_app.todos.service import TodosService

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    metrics: MetricsRegistry | None = None,
    tracer_provider: TracerProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The app owns its metrics registry, span recorder and todo store; they
    are exposed on ``app.state`` and injected into routes as dependencies.

    Args:
        settings: Settings to use (loaded from config files/env when omitted)
        metrics: Metrics registry to record into (a fresh one when omitted)
        tracer_provider: Tracer provider to trace with (built from settings
            when omitted and tracing is enabled)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, format=settings.log_format)

    metrics_config = settings.observability.metrics
    if metrics is None:
        metrics = MetricsRegistry(
            collect_default_metrics=metrics_config.collect_default_metrics,
            default_metrics_prefix=metrics_config.default_metrics_prefix,
        )

    tracing_config = settings.observability.tracing
    owns_tracer_provider = False
    if tracer_provider is None and tracing_config.enabled:
        tracer_provider = setup_tracing(tracing_config)
        owns_tracer_provider = True
        logger.info("opentelemetry_tracing_enabled", service_name=tracing_config.service_name)

    if tracer_provider is not None:
        spans = SpanRecorder(tracer_provider.get_tracer(TRACER_NAME))
    else:
        spans = SpanRecorder(trace.NoOpTracer())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "application_started",
            port=settings.port,
            environment=settings.environment,
            metrics_path=metrics_config.path if metrics_config.enabled else None,
        )
        yield
        if owns_tracer_provider and tracer_provider is not None:
            tracer_provider.shutdown()
        logger.info("application_stopped")

    app = FastAPI(
        title="Todo App",
        description="In-memory todo service with Prometheus metrics and OpenTelemetry tracing",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.spans = spans
    app.state.todos_service = TodosService(metrics=metrics, spans=spans)

    # Added innermost first: logging wraps tracing, which wraps metrics.
    app.add_middleware(RequestMetricsMiddleware, metrics=metrics)
    app.add_middleware(RequestTracingMiddleware, spans=spans)
    app.add_middleware(RequestLoggingMiddleware)

    _register_exception_handlers(app)

    register_routes(app, metrics_path=metrics_config.path if metrics_config.enabled else None)

    logger.info("app_created", environment=settings.environment)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(TodoAppAPIError)
    async def todo_app_api_error_handler(request: Request, exc: TodoAppAPIError) -> JSONResponse:
        """Handle TodoAppAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )

        # The request span is still current here; the fault belongs to it.
        record_exception(trace.get_current_span(), exc)

        response = ErrorResponse(error=ErrorBody(code=exc.error_code, message=exc.message))
        return JSONResponse(status_code=exc.status_code, content=response.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )

        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        response = ErrorResponse(
            error=ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            )
        )
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )

        response = ErrorResponse(
            error=ErrorBody(
                code=ErrorCode.INTERNAL_ERROR,
                message="An unexpected error occurred",
            )
        )
        return JSONResponse(status_code=500, content=response.model_dump())
