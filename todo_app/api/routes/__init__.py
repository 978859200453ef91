"""API route registration."""

from fastapi import FastAPI

from todo_app.observability.logging import get_logger

logger = get_logger(__name__)


def register_routes(app: FastAPI, *, metrics_path: str | None = "/metrics") -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        metrics_path: Path of the Prometheus endpoint, or None to not expose it
    """
    from todo_app.api.routes.health import create_metrics_router
    from todo_app.api.routes.health import router as health_router
    from todo_app.api.routes.todos import router as todos_router

    app.include_router(todos_router, tags=["Todos"])
    app.include_router(health_router, tags=["Health"])
    if metrics_path:
        app.include_router(create_metrics_router(metrics_path), tags=["Health"])

    logger.info("routes_registered", metrics_path=metrics_path)
